"""Bearer-token authentication for every request, ahead of DRF."""

import logging

from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.services import BlocklistUnavailable, TokenService, bearer_token, get_active_user

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = (
    "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
)


class JWTAuthMiddleware(MiddlewareMixin):
    """Attach the token's user to ``request.user`` or answer 401 / 503 directly.

    A request without a bearer header stays anonymous. A header that is
    present but unusable (bad signature, expired, blocklisted, stale
    ``ver``, deactivated user) is refused even on public endpoints.
    """

    def process_request(self, request):  # type: ignore[override]
        token = bearer_token(request)
        if token is None:
            request.user = AnonymousUser()
            return None

        try:
            user = self._authenticate(token)
        except AuthenticationFailed as exc:
            logger.debug("Rejected bearer token: %s", exc.detail)
            return _envelope_error(UNAUTHORIZED_MESSAGE, status.HTTP_401_UNAUTHORIZED)
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable during authentication")
            return _envelope_error(
                "Authentication service unavailable (blocklist).",
                status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        request.user = user
        return None

    @staticmethod
    def _authenticate(token: str):
        payload = TokenService.decode_token(token, expected_type="access")
        jti = payload.get("jti")
        if not jti or TokenService.is_token_blocked(jti):
            raise AuthenticationFailed("Token revoked")

        user = get_active_user(payload.get("sub"))
        if user is None:
            raise AuthenticationFailed("User not found or inactive")
        # Logout-all and password changes bump the version.
        if payload.get("ver") != user.token_version:
            raise AuthenticationFailed("Stale token version")
        return user


def _envelope_error(message: str, status_code: int) -> JsonResponse:
    return JsonResponse({"data": None, "errors": [message]}, status=status_code)


__all__ = ["JWTAuthMiddleware"]
