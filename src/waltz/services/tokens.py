"""JWT access token issuing and decoding."""

import logging
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from waltz.config import settings

logger = logging.getLogger(__name__)


def make_access_token(user_id: str, roles: list[str] | None = None, expires_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    lifetime = expires_minutes or settings.jwt_access_token_expire_minutes
    payload = {
        "sub": user_id,
        "roles": roles or [],
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and verify a token, raising ValueError if it is not acceptable."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
        )
    except JWTError as exc:
        logger.debug("JWT decode failed: %s", exc)
        raise ValueError(f"Invalid token: {exc}") from exc
