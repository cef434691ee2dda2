"""FastAPI dependencies: get_current_user, role guards and the active-user lookup.

Usage in any protected router:
    from src.lm_gateway.auth.dependencies import require_shopkeeper

    @router.get("/protected")
    async def protected(user: UserModel = Depends(require_shopkeeper)):
        ...

The websocket channel has no Authorization header; it resolves the join
token's subject through ``get_user_lookup`` instead.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.lm_common.database import async_session_factory, get_db_session
from src.lm_common.enums import UserRole
from src.lm_common.errors import AccountDisabledError, InvalidCredentialsError, RoleForbiddenError
from src.lm_gateway.auth.jwt_handler import decode_token
from src.lm_gateway.user.db_models import UserModel

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def _fetch_user(db: AsyncSession, user_id: str) -> UserModel | None:
    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Extract and validate the JWT Bearer token, return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    Raises HTTP 403 (AccountDisabledError) if the user account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    user_id: str | None = payload.get("sub")
    if not user_id:
        raise _CREDENTIALS_EXCEPTION

    user = await _fetch_user(db, user_id)
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


class ActiveUserLookup:
    """Loads a user by id in its own short-lived session.

    Long-lived connections use this so they do not pin a pooled DB
    connection for their whole lifetime.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def require_active(self, user_id: str) -> UserModel:
        """Raise InvalidCredentialsError if unknown, AccountDisabledError if inactive."""
        async with self._session_factory() as db:
            user = await _fetch_user(db, user_id)
        if user is None:
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountDisabledError()
        return user


def get_user_lookup() -> ActiveUserLookup:
    return ActiveUserLookup(async_session_factory)


async def require_customer(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if current_user.role != UserRole.CUSTOMER:
        raise RoleForbiddenError(UserRole.CUSTOMER.value)
    return current_user


async def require_shopkeeper(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    if current_user.role != UserRole.SHOPKEEPER:
        raise RoleForbiddenError(UserRole.SHOPKEEPER.value)
    return current_user
