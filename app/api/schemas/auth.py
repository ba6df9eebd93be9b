from pydantic import BaseModel, EmailStr, Field

from app.models.principal import Role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: Role = Role.patient


class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = Field(min_length=1)
    role: Role = Role.patient


class AccessToken(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    role: Role


class MeResponse(BaseModel):
    id: int
    role: Role
    email: str
    name: str
