"""Security utilities for API authentication and authorization."""

import time
from collections import OrderedDict, deque
from datetime import datetime, timedelta, timezone
from typing import Deque, Literal, Optional

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

from bakery_app.core.config import get_settings
from bakery_app.core.logging import logger

Role = Literal["admin", "customer"]

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token header
bearer_scheme = HTTPBearer(auto_error=False)


class TokenPayload(BaseModel):
    """Claims carried by an access token."""

    sub: int
    user_name: str
    role: Role
    exp: Optional[int] = None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(
    user_id: int,
    user_name: str,
    role: Role,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token for a user."""
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta

    # jose requires "sub" to be a string
    to_encode = {"sub": str(user_id), "user_name": user_name, "role": role, "exp": expire}
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    logger.debug("Access token issued", extra={"user_id": user_id, "role": role})
    return encoded_jwt


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """Decode and verify a JWT token. Returns None when invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return TokenPayload.model_validate(payload)
    except JWTError as e:
        logger.warning(f"JWT decode error: {e}")
        return None
    except PydanticValidationError as e:
        logger.warning(f"JWT payload invalid: {e.error_count()} errors")
        return None


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Optional[TokenPayload]:
    """Return the caller's claims when a valid bearer token is present."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> TokenPayload:
    """
    Require a valid bearer token.

    Missing token yields 401; a token that fails verification yields 403.
    """
    if credentials is None:
        logger.warning("Missing bearer token in request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    logger.debug("User authenticated", extra={"user_id": payload.sub, "role": payload.role})
    return payload


def require_role(role: Role):
    """Build a dependency that only lets one role through."""

    async def _require_role(user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
        if user.role != role:
            logger.warning(
                f"Access denied, {role} role required",
                extra={"user_id": user.sub, "role": user.role},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only {role} users can access this resource",
            )
        return user

    return _require_role


require_admin = require_role("admin")
require_authenticated = get_current_user


class RateLimiter:
    """
    Sliding-window request counter per identifier.

    The store is bounded: when ``max_keys`` identifiers are tracked the least
    recently seen one is dropped. Identifiers whose window has fully elapsed
    are evicted by ``sweep()``, which ``is_allowed`` runs once per window.
    """

    def __init__(self, requests_per_window: int = 60, window_seconds: float = 60.0, max_keys: int = 10000):
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self.requests: "OrderedDict[str, Deque[float]]" = OrderedDict()
        self._last_sweep = time.monotonic()

    def is_allowed(self, identifier: str, now: Optional[float] = None) -> bool:
        """Check if request is allowed based on rate limit, recording it if so."""
        now = time.monotonic() if now is None else now
        if now - self._last_sweep >= self.window_seconds:
            self.sweep(now)

        window_start = now - self.window_seconds
        hits = self.requests.get(identifier)
        if hits is None:
            hits = deque()
            self.requests[identifier] = hits
            while len(self.requests) > self.max_keys:
                evicted, _ = self.requests.popitem(last=False)
                logger.debug(f"Rate limiter evicted identifier {evicted}")
        else:
            self.requests.move_to_end(identifier)

        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.requests_per_window:
            return False

        hits.append(now)
        return True

    def remaining(self, identifier: str, now: Optional[float] = None) -> int:
        """Requests left for ``identifier`` in the current window."""
        now = time.monotonic() if now is None else now
        window_start = now - self.window_seconds
        hits = self.requests.get(identifier, ())
        used = sum(1 for t in hits if t > window_start)
        return max(0, self.requests_per_window - used)

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop identifiers with no hits inside the window. Returns count removed."""
        now = time.monotonic() if now is None else now
        window_start = now - self.window_seconds
        expired = [key for key, hits in self.requests.items() if not hits or hits[-1] <= window_start]
        for key in expired:
            del self.requests[key]
        self._last_sweep = now
        if expired:
            logger.debug(f"Rate limiter swept {len(expired)} identifiers")
        return len(expired)

    def __len__(self) -> int:
        return len(self.requests)
