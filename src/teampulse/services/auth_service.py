"""Authentication: password hashing, bearer tokens, registration and login."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import bcrypt
import jwt
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from teampulse.config import Settings
from teampulse.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    RateLimitedError,
    UnauthenticatedError,
)
from teampulse.models import User, UserRole, utcnow

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """Parse durations such as ``7d``, ``12h``, ``30m`` or ``3600``."""
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _require_secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise InternalError("JWT_SECRET not configured")
    return settings.jwt_secret


def create_access_token(user: User, settings: Settings, now: datetime | None = None) -> str:
    """Issue a signed bearer token for ``user``."""
    secret = _require_secret(settings)
    issued_at = now or utcnow()
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role,
        "iat": issued_at,
        "exp": issued_at + parse_duration(settings.jwt_expires_in),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verify signature and expiry, returning the claims."""
    secret = _require_secret(settings)
    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid token")


class LoginRateLimiter:
    """Moving window of failed login attempts per client address.

    Backed by ``limits`` in-memory storage, which expires idle keys itself.
    """

    def __init__(self, limit: int, window_seconds: int):
        self.limit = limit
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(limit, window_seconds)
        self._limiter = MovingWindowRateLimiter(MemoryStorage())

    def check(self, key: str) -> None:
        """Raise RateLimitedError once ``key`` used up its failed attempts."""
        if not self._limiter.test(self._item, key):
            logger.warning("Login rate limit reached for %s", key)
            raise RateLimitedError("Too many login attempts. Please wait and try again.")

    def record_failure(self, key: str) -> None:
        self._limiter.hit(self._item, key)

    def reset(self, key: str) -> None:
        self._limiter.clear(self._item, key)


class AuthService:
    """Registration, login and credential management."""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        department: str | None = None,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create a user account; the email must be unused."""
        if await self.get_by_email(email) is not None:
            raise ConflictError("User with this email already exists")

        user = User(
            name=name,
            email=email.strip().lower(),
            password_hash=hash_password(password, self.settings.bcrypt_rounds),
            department=department,
            role=UserRole(role).value,
        )
        self.session.add(user)
        await self.session.flush()
        logger.info("Registered user %s with role %s", user.id, user.role)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Return the active user matching the credentials."""
        user = await self.get_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email.strip().lower())
            raise UnauthenticatedError("Invalid email or password")
        user.updated_at = utcnow()
        return user

    async def change_password(self, user_id: UUID, current_password: str, new_password: str) -> None:
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user.password_hash):
            raise UnauthenticatedError("Current password is incorrect")
        user.password_hash = hash_password(new_password, self.settings.bcrypt_rounds)
        await self.session.flush()

    async def resolve_token(self, token: str) -> User:
        """Map a bearer token to its active user."""
        claims = decode_access_token(token, self.settings)
        try:
            user_id = UUID(str(claims.get("sub")))
        except ValueError:
            raise UnauthenticatedError("Invalid token")

        user = await self.session.get(User, user_id)
        if user is None or not user.is_active:
            raise UnauthenticatedError("User not found or inactive")
        return user

    def issue_token(self, user: User) -> str:
        return create_access_token(user, self.settings)
