"""Authentication helpers that bridge JWT middleware into DRF.

JWT verification happens in ``JWTAuthMiddleware``; DRF only needs to see the
user that middleware already attached to the Django request.
"""

from typing import Any, Optional, Tuple

from django.contrib.auth.models import AnonymousUser
from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF.

    No credential parsing happens here. Anonymous callers are left
    unauthenticated so public article endpoints can apply visibility rules.
    """

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or isinstance(user, AnonymousUser):
            return None

        if not getattr(user, "is_authenticated", False):
            return None

        return user, None

    def authenticate_header(self, request) -> str:
        # A WWW-Authenticate value makes DRF answer 401 instead of 403.
        return 'Bearer realm="api"'


__all__ = ["MiddlewareUserAuthentication"]
