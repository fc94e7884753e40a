"""
Authentication service.

Signup, login, token refresh and the password lifecycle. Authorization
decisions are not made here; see ``services.authorization``.
"""

from dataclasses import dataclass
from urllib.parse import urlencode

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from securegate.core.config import settings
from securegate.core.exceptions import BadRequestError, UnauthorizedError
from securegate.core.interfaces.email import EmailBackend, OutgoingEmail
from securegate.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_token,
    decode_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from securegate.implementations.email import get_email_backend
from securegate.models.user import User
from securegate.repositories.base import conflict_on_duplicate
from securegate.repositories.rbac import RoleRepository, UserRoleRepository
from securegate.repositories.user import UserRepository
from securegate.utils.timezone import expires_in, is_expired, utc_now

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class TokenPair:
    """Access and refresh token pair."""
    access_token: str
    refresh_token: str


class AuthService:
    """Authentication service."""

    def __init__(self, db: AsyncSession, email_backend: EmailBackend | None = None):
        self.db = db
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.bindings = UserRoleRepository(db)
        self.email_backend = email_backend or get_email_backend()

    def create_tokens(self, user_id: int) -> TokenPair:
        """Create access and refresh token pair."""
        return TokenPair(
            access_token=create_token(user_id, ACCESS_TOKEN),
            refresh_token=create_token(user_id, REFRESH_TOKEN),
        )

    async def signup(self, email: str, password: str) -> User:
        """
        Register a new user.

        The configured default role is granted when it exists and is active.
        """
        email = email.strip().lower()
        if await self.users.get_by_email(email):
            raise BadRequestError("Email already registered")

        async with conflict_on_duplicate(self.db, "Email already registered"):
            user = await self.users.create(email=email, password_hash=hash_password(password))

        if settings.auth.default_role:
            role = await self.roles.get_by_name(settings.auth.default_role, deleted=False)
            if role is not None:
                await self.bindings.create(user_id=user.id, role_id=role.id)

        logger.info("auth.signup", user_id=user.id)
        return user

    async def login(self, email: str, password: str) -> TokenPair:
        """
        Authenticate user and return tokens.

        Raises:
            UnauthorizedError: unknown or deactivated user, or wrong password
        """
        user = await self.users.get_by_email(email.strip().lower())

        if not user or not verify_password(password, user.password_hash):
            logger.info("auth.failed", reason="invalid_credentials")
            raise UnauthorizedError(INVALID_CREDENTIALS)

        await self.users.update(user, last_login_at=utc_now())
        logger.info("auth.login", user_id=user.id)
        return self.create_tokens(user.id)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair."""
        payload = decode_token(refresh_token, REFRESH_TOKEN)
        user = await self._user_from_subject(payload["sub"])
        return self.create_tokens(user.id)

    async def resolve_user(self, access_token: str) -> User:
        """
        Load the active user an access token was issued for.

        Raises:
            UnauthorizedError: bad token, or the user is gone or deactivated
        """
        payload = decode_token(access_token, ACCESS_TOKEN)
        return await self._user_from_subject(payload["sub"])

    async def _user_from_subject(self, subject: str) -> User:
        try:
            user_id = int(subject)
        except ValueError:
            raise UnauthorizedError("Invalid token")

        user = await self.users.get_by_id(user_id)
        if not user:
            raise UnauthorizedError("User not found")
        return user

    # ============================================================
    # PASSWORD LIFECYCLE
    # ============================================================

    async def reset_password(self, user_id: int, old_password: str, new_password: str) -> None:
        """
        Change a password knowing the current one.

        Raises:
            UnauthorizedError: unknown user or wrong old password
            BadRequestError: new password equals the old one
        """
        user = await self.users.get_by_id(user_id)
        if not user or not verify_password(old_password, user.password_hash):
            raise UnauthorizedError("Invalid password")

        if old_password == new_password:
            raise BadRequestError("New password can not be the same as the old one")

        await self.users.update(user, password_hash=hash_password(new_password))
        logger.info("auth.password_reset", user_id=user.id)

    async def forgot_password(self, email: str) -> None:
        """
        Email a single-use reset link.

        Unknown emails return silently so callers can't probe for accounts.
        """
        user = await self.users.get_by_email(email.strip().lower())
        if not user:
            logger.info("auth.forgot_password_unknown_email")
            return

        token = generate_reset_token()
        await self.users.update(
            user,
            reset_token_hash=hash_reset_token(token),
            reset_token_expires_at=expires_in(settings.auth.reset_token_expire_minutes),
        )

        link = f"{settings.auth.reset_password_url}?{urlencode({'token': token})}"
        await self.email_backend.send(
            OutgoingEmail(
                recipient=user.email,
                subject="Reset your password",
                text=f"Use the link below to reset your password:\n\n{link}\n",
                html=f'<p>Use the link below to reset your password:</p><p><a href="{link}">{link}</a></p>',
            )
        )
        logger.info("auth.forgot_password", user_id=user.id)

    async def complete_password_reset(self, token: str, new_password: str) -> None:
        """
        Set a new password from a reset token.

        Raises:
            BadRequestError: unknown, used or expired token
        """
        user = await self.users.get_by_reset_token_hash(hash_reset_token(token))
        if not user or is_expired(user.reset_token_expires_at):
            raise BadRequestError("Invalid or expired reset token")

        await self.users.update(
            user,
            password_hash=hash_password(new_password),
            reset_token_hash=None,
            reset_token_expires_at=None,
        )
        logger.info("auth.password_reset_completed", user_id=user.id)
