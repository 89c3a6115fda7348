"""Article endpoints; every action delegates to ``articles.services``."""

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from access_control.capabilities import Capability
from access_control.permissions import CapabilityPermission
from access_control.policy import actor_from_request
from core.response import BaseViewSet, api_response

from . import services
from .models import Article
from .serializers import (
    ArticleListQuerySerializer,
    ArticleSerializer,
    ArticleStatusSerializer,
    ArticleWriteSerializer,
)


class ArticleViewSet(BaseViewSet):
    queryset = Article.objects.none()
    serializer_class = ArticleSerializer
    permission_classes = [CapabilityPermission]
    public_actions = ("list", "retrieve", "by_slug")
    required_capabilities = {
        "create": Capability.CREATE_ARTICLE,
        "set_status": Capability.CHANGE_ARTICLE_STATUS,
        "stats": Capability.VIEW_ARTICLE_STATS,
    }
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        """Published articles for the public; editors may filter by any status."""
        query = ArticleListQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        items, meta = services.list_articles(actor_from_request(request), query.to_filter())
        return api_response(ArticleSerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        article = services.get_article(actor_from_request(request), article_id=int(pk))
        return api_response(ArticleSerializer(article).data)

    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[a-z0-9-]+)")
    def by_slug(self, request, slug=None):
        article = services.get_article(actor_from_request(request), slug=slug)
        return api_response(ArticleSerializer(article).data)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = ArticleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = services.create_article(actor_from_request(request), serializer.validated_data)
        return api_response(ArticleSerializer(article).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def update(self, request, pk=None):
        """PUT and PATCH both apply partial updates."""
        serializer = ArticleWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        article = services.update_article(actor_from_request(request), int(pk), serializer.validated_data)
        return api_response(ArticleSerializer(article).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        services.delete_article(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["put", "patch"], url_path="status")
    def set_status(self, request, pk=None):
        """Editorial workflow: move an article to any status regardless of authorship."""
        serializer = ArticleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = services.change_article_status(
            actor_from_request(request), int(pk), serializer.validated_data["status"]
        )
        return api_response(ArticleSerializer(article).data)

    @action(detail=False, methods=["get"])
    def mine(self, request):
        query = ArticleListQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        items, meta = services.list_own_articles(actor_from_request(request), query.to_filter())
        return api_response(ArticleSerializer(items, many=True).data, meta=meta)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.article_stats(actor_from_request(request)))


__all__ = ["ArticleViewSet"]
