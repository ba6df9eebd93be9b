from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import create_access_token, hash_password, verify_password
from app.models.patient import Patient
from app.models.principal import Role
from app.models.psychiatrist import Psychiatrist

Account = Patient | Psychiatrist

_ACCOUNT_MODELS: dict[Role, type[Patient] | type[Psychiatrist]] = {
    Role.patient: Patient,
    Role.psychiatrist: Psychiatrist,
}


async def get_account_by_email(session: AsyncSession, role: Role, email: str) -> Account | None:
    model = _ACCOUNT_MODELS[role]
    result = await session.execute(select(model).where(model.email == email.lower()))
    return result.scalar_one_or_none()


async def get_account(session: AsyncSession, role: Role, account_id: int) -> Account | None:
    return await session.get(_ACCOUNT_MODELS[role], account_id)


async def create_account(
    session: AsyncSession,
    role: Role,
    email: str,
    password: str,
    name: str,
) -> Account:
    model = _ACCOUNT_MODELS[role]
    account = model(email=email.lower(), name=name, hashed_password=hash_password(password))
    session.add(account)
    await session.flush()
    await session.refresh(account)
    return account


def make_access_token(account_id: int, role: Role) -> tuple[str, int]:
    access = create_access_token(account_id, role.value)
    expires_in = settings.access_token_expire_minutes * 60
    return access, expires_in


async def login_account(
    session: AsyncSession, role: Role, email: str, password: str
) -> tuple[Account, str, int] | None:
    account = await get_account_by_email(session, role, email)
    if not account or not account.hashed_password:
        return None
    if not verify_password(password, account.hashed_password):
        return None
    access, expires_in = make_access_token(account.id, role)
    return account, access, expires_in


async def signup_account(
    session: AsyncSession, role: Role, email: str, password: str, name: str
) -> tuple[Account, str, int] | None:
    existing = await get_account_by_email(session, role, email)
    if existing:
        return None
    account = await create_account(session, role, email, password, name)
    access, expires_in = make_access_token(account.id, role)
    return account, access, expires_in
