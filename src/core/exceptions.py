"""Domain error taxonomy and the API error envelope."""

import logging
from typing import Any

from django.conf import settings
from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from authentication.services import BlocklistUnavailable

logger = logging.getLogger(__name__)


class PortalError(APIException):
    """Base class for domain failures raised by services and policy checks.

    Carries the offending ``field`` (when there is one) so the client can
    correct its request without parsing the message.
    """

    field: str | None = None

    def __init__(self, detail: Any = None, field: str | None = None):
        super().__init__(detail)
        if field is not None:
            self.field = field

    def as_error(self) -> Any:
        message = str(self.detail)
        if self.field:
            return {"field": self.field, "message": message}
        return message


class ValidationError(PortalError):
    """Malformed input or a reference that does not resolve."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"


class ForbiddenError(PortalError):
    """The resource is known to the caller but the operation is denied."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "forbidden"


class NotFoundError(PortalError):
    """The resource is absent, or the caller may not learn that it exists."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(PortalError):
    """A uniqueness constraint (slug, bookmark) would be violated."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."
    default_code = "conflict"


def _normalize_errors(payload: Any) -> list[Any]:
    """Convert DRF's response.data into a list for the envelope."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict) and "detail" in payload:
        return [payload["detail"]]
    return [payload]


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response | None:
    """Wrap API errors in the `{ "data": null, "errors": [...] }` shape.

    - Domain errors render their field and message as-is.
    - Blocklist and database outages fail closed with 503.
    - DRF's default handler covers everything else; auth failures are
      normalized to 401 and generic permission denials to 403.
    """

    if isinstance(exc, PortalError):
        logger.info("%s: %s", type(exc).__name__, exc.detail)
        return Response({"data": None, "errors": [exc.as_error()]}, status=exc.status_code)

    if isinstance(exc, BlocklistUnavailable):
        logger.error("Token blocklist unavailable: %s", exc)
        return Response(
            {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    if isinstance(exc, DatabaseError):
        logger.exception("Storage failure while handling request")
        return Response(
            {"data": None, "errors": ["Service temporarily unavailable."]},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    response = drf_exception_handler(exc, context)

    if response is None:
        return response

    if isinstance(exc, (AuthenticationFailed, NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code >= 400:
        base_errors = response.data

        if response.status_code == status.HTTP_401_UNAUTHORIZED:
            if getattr(settings, "DEBUG_AUTH_ERRORS", False):
                errors = _normalize_errors(base_errors)
            else:
                errors = [
                    "Authentication credentials were not provided or are invalid, "
                    "token revoked, or user is inactive."
                ]
        elif response.status_code == status.HTTP_403_FORBIDDEN:
            errors = [
                "You do not have permission to perform this action on this resource."
            ]
        else:
            errors = _normalize_errors(base_errors)

        response.data = {"data": None, "errors": errors}

    return response


__all__ = [
    "PortalError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "custom_exception_handler",
]
