"""Authentication service with password hashing and user management."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import structlog
from passlib.context import CryptContext
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from perftrack.core.auth import create_access_token
from perftrack.core.config import get_settings
from perftrack.infrastructure.db.models import UserModel, UserRole, UserStatus

logger = structlog.get_logger()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthError(Exception):
    """Base exception for authentication errors."""


class UserExistsError(AuthError):
    """Raised when attempting to register with existing email."""


class InvalidCredentialsError(AuthError):
    """Raised when login credentials are invalid."""


class UserNotFoundError(AuthError):
    """Raised when user is not found."""


class UserInactiveError(AuthError):
    """Raised when user account is inactive or suspended."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def register_user(
        self,
        *,
        email: str,
        password: str,
        full_name: str | None = None,
        role: str = UserRole.EMPLOYEE.value,
    ) -> dict:
        """
        Register a new user.

        Returns:
            dict with user data and tokens
        """
        await logger.ainfo("register_attempt", email=email, role=role)

        try:
            user_role = UserRole(role)
        except ValueError as exc:
            raise AuthError(f"Invalid role: {role}") from exc

        user = UserModel(
            email=email.lower(),
            hashed_password=hash_password(password),
            full_name=full_name,
            role=user_role,
            status=UserStatus.ACTIVE,
        )

        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
        except IntegrityError as exc:
            await self.session.rollback()
            await logger.awarning("register_duplicate_email", email=email)
            raise UserExistsError(f"User with email {email} already exists") from exc

        await logger.ainfo("register_success", user_id=user.id, email=email)
        return {"user": self._user_to_dict(user), "tokens": self._generate_tokens(user)}

    async def login(self, *, email: str, password: str) -> dict:
        """
        Authenticate user with email and password.

        Returns:
            dict with user data and tokens
        """
        await logger.ainfo("login_attempt", email=email)

        stmt = select(UserModel).where(UserModel.email == email.lower())
        user = (await self.session.execute(stmt)).scalar_one_or_none()

        if user is None or not verify_password(password, user.hashed_password):
            await logger.awarning("login_invalid_credentials", email=email)
            raise InvalidCredentialsError("Invalid email or password")

        if user.status != UserStatus.ACTIVE:
            await logger.awarning("login_inactive_user", email=email, status=user.status.value)
            raise UserInactiveError(f"Account is {user.status.value}")

        await self.session.execute(
            update(UserModel)
            .where(UserModel.id == user.id)
            .values(last_login_at=datetime.now(UTC))
        )
        await self.session.commit()
        await self.session.refresh(user)

        await logger.ainfo("login_success", user_id=user.id, email=email)
        return {"user": self._user_to_dict(user), "tokens": self._generate_tokens(user)}

    async def get_user_by_id(self, user_id: str) -> dict:
        stmt = select(UserModel).where(UserModel.id == user_id)
        user = (await self.session.execute(stmt)).scalar_one_or_none()

        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")

        return self._user_to_dict(user)

    def _generate_tokens(self, user: UserModel) -> dict:
        settings = get_settings()
        access_token = create_access_token(
            subject=user.id,
            roles=[user.role.value],
            email=user.email,
            expires_delta=timedelta(seconds=settings.access_token_ttl_seconds),
        )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": settings.access_token_ttl_seconds,
        }

    def _user_to_dict(self, user: UserModel) -> dict:
        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role.value,
            "status": user.status.value,
            "created_at": user.created_at,
            "last_login_at": user.last_login_at,
        }
