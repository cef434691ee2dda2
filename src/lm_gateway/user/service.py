"""User domain service: register, login, refresh.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.lm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    UsernameExistsError,
)
from src.lm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.lm_gateway.auth.password import hash_password, verify_password
from src.lm_gateway.user.db_models import UserModel
from src.lm_gateway.user.schemas import RegisterRequest


class UserService:
    """Stateless service: instantiate once, reuse across requests."""

    async def register(self, req: RegisterRequest, db: AsyncSession) -> UserModel:
        """Register a customer or shopkeeper.

        The caller must wrap this in `async with db.begin()`.
        """
        # DB UNIQUE constraints are the final guard
        result = await db.execute(
            select(UserModel).where(UserModel.username == req.username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(
            select(UserModel).where(UserModel.email == req.email)
        )
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            username=req.username,
            email=req.email,
            password_hash=hash_password(req.password),
            role=req.role,
            phone=req.phone,
            latitude=req.latitude,
            longitude=req.longitude,
            is_active=True,
        )
        db.add(user)
        await db.flush()  # Get user.id and created_at without committing
        await db.refresh(user)
        return user

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate user and return (user, access_token, refresh_token).

        "User not found" and "Wrong password" both raise InvalidCredentialsError
        so usernames cannot be enumerated.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id), user.role),
            create_refresh_token(str(user.id), user.role),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]), str(payload.get("role", "customer")))
