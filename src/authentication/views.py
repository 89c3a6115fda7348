"""Account endpoints under ``/auth/`` and account administration under ``/users/``.

Session logic lives in ``authentication.services``, administration in ``authentication.accounts``.
"""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated
from rest_framework.response import Response

from access_control.capabilities import Capability
from access_control.permissions import CapabilityPermission
from access_control.policy import actor_from_request
from core.response import BaseAPIView, BaseViewSet, api_response

from . import accounts, services
from .serializers import (
    AccountCreateSerializer,
    AccountQuerySerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    ChangePasswordSerializer,
    LoginSerializer,
    ProfileUpdateSerializer,
    RegisterSerializer,
    UserDetailSerializer,
)

logger = logging.getLogger(__name__)


def _current_user(request):
    if not request.user.is_authenticated:
        raise NotAuthenticated()
    return request.user


def _token_pair(access: str, refresh: str, **extra: Any) -> dict[str, Any]:
    return {"access": access, "refresh": refresh, **extra}


class RegisterView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User %s registered with role %s", user.pk, user.role)
        return api_response(UserDetailSerializer(user).data, status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    """Email and password in, token pair and profile out."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        access, refresh = services.TokenService.generate_tokens(user)
        return api_response(_token_pair(access, refresh, user=UserDetailSerializer(user).data))


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        access, refresh = services.refresh_session(request.data.get("refresh"))
        return api_response(_token_pair(access, refresh))


class LogoutView(BaseAPIView):
    """Revoke only the access token presented with this request."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        services.revoke_access_token(services.bearer_token(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class LogoutAllView(BaseAPIView):
    """Revoke every token of the caller, on every device."""

    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        services.revoke_all_sessions(_current_user(request), services.bearer_token(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def get(self, request):
        return api_response(UserDetailSerializer(_current_user(request)).data)

    # noinspection PyMethodMayBeStatic
    def patch(self, request):
        """Only ``name`` is editable; email and role changes are rejected."""
        user = _current_user(request)
        serializer = ProfileUpdateSerializer(user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return api_response(UserDetailSerializer(user).data)

    # noinspection PyMethodMayBeStatic
    def delete(self, request):
        services.deactivate_account(_current_user(request), services.bearer_token(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ChangePasswordView(BaseAPIView):
    permission_classes: list[Any] = []

    # noinspection PyMethodMayBeStatic
    def post(self, request):
        user = _current_user(request)
        serializer = ChangePasswordSerializer(data=request.data, context={"user": user})
        serializer.is_valid(raise_exception=True)
        access, refresh = services.change_password(user, serializer.validated_data["new_password"])
        return api_response(_token_pair(access, refresh))



class UserViewSet(BaseViewSet):
    """Account administration; every action needs ``MANAGE_USERS``."""

    queryset = get_user_model().objects.none()
    serializer_class = AccountSerializer
    permission_classes = [CapabilityPermission]
    required_capabilities = {
        name: Capability.MANAGE_USERS
        for name in ("list", "retrieve", "create", "update", "partial_update", "destroy", "stats")
    }
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        query = AccountQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        users, meta = accounts.list_users(query.validated_data)
        return api_response(AccountSerializer(users, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(AccountSerializer(accounts.get_user(int(pk))).data)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = AccountCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = accounts.create_account(serializer.validated_data)
        return api_response(AccountSerializer(user).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def update(self, request, pk=None):
        serializer = AccountUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = accounts.update_account(actor_from_request(request), int(pk), serializer.validated_data)
        return api_response(AccountSerializer(user).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        accounts.deactivate_user(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(accounts.user_stats())


__all__ = [
    "RegisterView",
    "LoginView",
    "RefreshView",
    "LogoutView",
    "LogoutAllView",
    "MeView",
    "ChangePasswordView",
    "UserViewSet",
]
