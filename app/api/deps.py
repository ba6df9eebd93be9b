from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_session
from app.core.security import decode_access_token
from app.models.principal import Principal, Role
from app.services.auth_service import get_account

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    subject, role_value = decode_access_token(credentials.credentials)
    if not subject or not role_value:
        raise _unauthorized("Invalid or expired token")
    try:
        account_id = int(subject)
        role = Role(role_value)
    except ValueError:
        raise _unauthorized("Invalid token")
    account = await get_account(session, role, account_id)
    if not account:
        raise _unauthorized("Account not found")
    return Principal(id=account_id, role=role)


async def get_current_patient(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_patient:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Patient account required")
    return principal


async def get_current_psychiatrist(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_psychiatrist:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Psychiatrist account required")
    return principal
