import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_principal
from app.api.schemas.auth import AccessToken, LoginRequest, MeResponse, SignupRequest
from app.core.db import get_session
from app.models.principal import Principal
from app.services.auth_service import get_account, login_account, signup_account

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AccessToken)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AccessToken:
    result = await login_account(session, body.role, body.email, body.password)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    _, access, expires_in = result
    return AccessToken(access_token=access, expires_in=expires_in, role=body.role)


@router.post("/signup", response_model=AccessToken, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    session: AsyncSession = Depends(get_session),
) -> AccessToken:
    result = await signup_account(session, body.role, body.email, body.password, body.name)
    if not result:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists",
        )
    account, access, expires_in = result
    logger.info("New %s account %s", body.role.value, account.id)
    return AccessToken(access_token=access, expires_in=expires_in, role=body.role)


@router.get("/me", response_model=MeResponse)
async def me(
    session: AsyncSession = Depends(get_session),
    principal: Principal = Depends(get_current_principal),
) -> MeResponse:
    account = await get_account(session, principal.role, principal.id)
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account not found")
    return MeResponse(id=principal.id, role=principal.role, email=account.email, name=account.name)
