"""Category and channel endpoints."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.capabilities import Capability
from access_control.permissions import CapabilityPermission
from access_control.policy import actor_from_request
from core.response import BaseViewSet, api_response

from . import services
from .models import Category, Channel
from .serializers import CatalogQuerySerializer, CategorySerializer, ChannelSerializer


def _query_params(request) -> dict:
    query = CatalogQuerySerializer(data=request.query_params.dict())
    query.is_valid(raise_exception=True)
    return query.validated_data


class CategoryViewSet(BaseViewSet):
    """Public category reads; writes are reserved to admins."""

    queryset = Category.objects.none()
    serializer_class = CategorySerializer
    permission_classes = [CapabilityPermission]
    public_actions = ("list", "retrieve", "by_slug", "active")
    required_capabilities = {
        "create": Capability.MANAGE_CATEGORIES,
        "update": Capability.MANAGE_CATEGORIES,
        "partial_update": Capability.MANAGE_CATEGORIES,
        "destroy": Capability.MANAGE_CATEGORIES,
        "stats": Capability.VIEW_PORTAL_STATS,
    }
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        items, meta = services.list_categories(_query_params(request))
        return api_response(CategorySerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(CategorySerializer(services.get_category(int(pk))).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[a-z0-9-]+)")
    def by_slug(self, request, slug=None):
        return api_response(CategorySerializer(services.get_category(slug=slug)).data)

    @action(detail=False, methods=["get"])
    def active(self, request):
        """Active categories by name, unpaginated, for pickers."""
        return api_response(CategorySerializer(services.list_active_categories(), many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.category_stats())

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = CategorySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        category = services.create_category(serializer.validated_data)
        return api_response(CategorySerializer(category).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def update(self, request, pk=None):
        serializer = CategorySerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        category = services.update_category(int(pk), serializer.validated_data)
        return api_response(CategorySerializer(category).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        services.delete_category(int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class ChannelViewSet(BaseViewSet):
    """Institution channels: public reads, owner-managed writes, admin verification."""

    queryset = Channel.objects.none()
    serializer_class = ChannelSerializer
    permission_classes = [CapabilityPermission]
    public_actions = ("list", "retrieve", "by_slug", "verified")
    required_capabilities = {
        "create": Capability.CREATE_CHANNEL,
        "stats": Capability.VIEW_PORTAL_STATS,
    }
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        items, meta = services.list_channels(_query_params(request))
        return api_response(ChannelSerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        return api_response(ChannelSerializer(services.get_channel(int(pk))).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[a-z0-9-]+)")
    def by_slug(self, request, slug=None):
        return api_response(ChannelSerializer(services.get_channel(slug=slug)).data)

    @action(detail=False, methods=["get"])
    def verified(self, request):
        return api_response(ChannelSerializer(services.list_verified_channels(), many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.channel_stats())

    @action(detail=False, methods=["get"])
    def mine(self, request):
        items, meta = services.list_channels(_query_params(request), owner=actor_from_request(request))
        return api_response(ChannelSerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = ChannelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        channel = services.create_channel(actor_from_request(request), serializer.validated_data)
        return api_response(ChannelSerializer(channel).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def update(self, request, pk=None):
        serializer = ChannelSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        channel = services.update_channel(actor_from_request(request), int(pk), serializer.validated_data)
        return api_response(ChannelSerializer(channel).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        services.delete_channel(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


__all__ = ["CategoryViewSet", "ChannelViewSet"]
