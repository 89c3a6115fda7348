"""JWT issuance and revocation, plus the account session use cases built on them."""

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Tuple

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework.exceptions import AuthenticationFailed

from core.redis_client import get_redis_client

logger = logging.getLogger(__name__)


class BlocklistUnavailable(Exception):
    """Redis could not be reached for a blocklist read or write; callers fail closed."""


class TokenService:
    """Signs, verifies and revokes access and refresh tokens.

    Both token types embed the user's role and ``token_version`` (claim
    ``ver``). Revoking a single token stores its ``jti`` in Redis until the
    token would have expired anyway.
    """

    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @staticmethod
    def access_ttl() -> timedelta:
        return timedelta(minutes=settings.ACCESS_TOKEN_MINUTES)

    @staticmethod
    def refresh_ttl() -> timedelta:
        return timedelta(hours=settings.REFRESH_TOKEN_HOURS)

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        """Return an ``(access, refresh)`` pair for ``user``."""
        now = datetime.now(timezone.utc)
        return (
            cls._sign(cls._claims(user, "access", now, cls.access_ttl())),
            cls._sign(cls._claims(user, "refresh", now, cls.refresh_ttl())),
        )

    @classmethod
    def _sign(cls, claims: dict[str, Any]) -> str:
        return jwt.encode(claims, settings.SECRET_KEY, algorithm=cls.ALGORITHM)

    @staticmethod
    def _claims(user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        return {
            "sub": str(user.id),
            "jti": uuid.uuid4().hex,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + ttl).timestamp()),
            "role": str(user.role),
            "ver": user.token_version,
            "type": token_type,
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Verify signature and expiry; reject a token of the wrong ``type``."""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise AuthenticationFailed("Invalid token type")
        return payload

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        ttl_seconds = max(1, exp - int(time.time()))
        try:
            get_redis_client().setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except Exception as exc:  # pragma: no cover - network failure
            logger.error("Redis unavailable while blocklisting token: %s", exc)
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        try:
            return get_redis_client().get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


def get_active_user(user_id: Any):
    """Active user with primary key ``user_id``; None when missing, malformed or deactivated."""
    if not user_id:
        return None
    User = get_user_model()
    try:
        user = User.objects.get(pk=int(user_id))
    except (User.DoesNotExist, TypeError, ValueError):
        return None
    return user if user.is_active else None


def bearer_token(request) -> Optional[str]:
    header = request.META.get("HTTP_AUTHORIZATION", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1]
    return None


def revoke_access_token(token: Optional[str]) -> None:
    """Blocklist one access token; a missing token is an authentication failure."""
    if not token:
        raise AuthenticationFailed("Missing token.")
    payload = TokenService.decode_token(token, expected_type="access")
    TokenService.block_token(payload["jti"], payload["exp"])


def bump_token_version(user, *extra_fields: str) -> None:
    user.token_version = (user.token_version or 1) + 1
    user.save(update_fields=["token_version", *extra_fields])


def refresh_session(refresh_token: Optional[str]) -> Tuple[str, str]:
    """Trade a refresh token for a new pair.

    Tokens of deactivated users, or minted before the last logout-all or
    password change, are refused.
    """
    if not refresh_token:
        raise AuthenticationFailed("Refresh token required")

    payload = TokenService.decode_token(refresh_token, expected_type="refresh")
    user = get_active_user(payload.get("sub"))
    if user is None:
        raise AuthenticationFailed("User not found or inactive")
    if payload.get("ver") != user.token_version:
        raise AuthenticationFailed("Invalid or revoked refresh token")
    return TokenService.generate_tokens(user)


def revoke_all_sessions(user, current_token: Optional[str] = None) -> None:
    bump_token_version(user)
    if current_token:
        revoke_access_token(current_token)
    logger.info("User %s revoked all tokens", user.pk)


def change_password(user, new_password: str) -> Tuple[str, str]:
    """Store the new password and return tokens; every older token stops working."""
    user.set_password(new_password)
    bump_token_version(user, "password_hash")
    logger.info("User %s changed password", user.pk)
    return TokenService.generate_tokens(user)


def deactivate_account(user, current_token: Optional[str] = None) -> None:
    """Soft delete: the row stays so authored articles keep their author."""
    if current_token:
        revoke_access_token(current_token)
    user.is_active = False
    user.save(update_fields=["is_active"])
    logger.info("User %s deactivated", user.pk)


__all__ = [
    "TokenService",
    "BlocklistUnavailable",
    "get_active_user",
    "bearer_token",
    "revoke_access_token",
    "bump_token_version",
    "refresh_session",
    "revoke_all_sessions",
    "change_password",
    "deactivate_account",
]
