"""Comment and bookmark endpoints."""

from typing import Any

from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated
from rest_framework.response import Response

from access_control.capabilities import Capability
from access_control.permissions import CapabilityPermission
from access_control.policy import actor_from_request
from core.response import BaseAPIView, BaseViewSet, api_response

from . import services
from .models import Bookmark, Comment
from .serializers import (
    BookmarkBulkDeleteSerializer,
    BookmarkCreateSerializer,
    BookmarkSerializer,
    CommentCreateSerializer,
    CommentSerializer,
    CommentUpdateSerializer,
    PageQuerySerializer,
)


def _page_params(request) -> dict:
    query = PageQuerySerializer(data=request.query_params.dict())
    query.is_valid(raise_exception=True)
    return query.validated_data


class ArticleCommentsView(BaseAPIView):
    """Comments of one article: public listing, authenticated posting."""

    permission_classes: list[Any] = []
    serializer_class = CommentSerializer

    # noinspection PyMethodMayBeStatic
    def get(self, request, article_id: int):
        items, meta = services.list_article_comments(actor_from_request(request), article_id, _page_params(request))
        return api_response(CommentSerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def post(self, request, article_id: int):
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        serializer = CommentCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        comment = services.create_comment(actor_from_request(request), article_id, serializer.validated_data)
        return api_response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)


class CommentViewSet(BaseViewSet):
    queryset = Comment.objects.none()
    serializer_class = CommentSerializer
    permission_classes = [CapabilityPermission]
    public_actions = ("retrieve",)
    required_capabilities = {"stats": Capability.VIEW_PORTAL_STATS}
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        comment = services.get_comment(actor_from_request(request), int(pk))
        return api_response(CommentSerializer(comment).data)

    # noinspection PyMethodMayBeStatic
    def update(self, request, pk=None):
        serializer = CommentUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        comment = services.update_comment(actor_from_request(request), int(pk), serializer.validated_data)
        return api_response(CommentSerializer(comment).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        services.delete_comment(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def report(self, request, pk=None):
        comment = services.report_comment(actor_from_request(request), int(pk))
        return api_response(CommentSerializer(comment).data)

    @action(detail=False, methods=["get"])
    def mine(self, request):
        items, meta = services.list_own_comments(actor_from_request(request), _page_params(request))
        return api_response(CommentSerializer(items, many=True).data, meta=meta)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.comment_stats())


class BookmarkViewSet(BaseViewSet):
    """The caller's own bookmarks; nobody else's are visible."""

    queryset = Bookmark.objects.none()
    serializer_class = BookmarkSerializer
    permission_classes = [CapabilityPermission]
    public_actions: tuple = ()
    required_capabilities: dict = {}
    lookup_value_regex = r"\d+"

    # noinspection PyMethodMayBeStatic
    def list(self, request):
        items, meta = services.list_bookmarks(actor_from_request(request), _page_params(request))
        return api_response(BookmarkSerializer(items, many=True).data, meta=meta)

    # noinspection PyMethodMayBeStatic
    def create(self, request):
        serializer = BookmarkCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bookmark = services.create_bookmark(actor_from_request(request), serializer.validated_data["article_id"])
        return api_response(BookmarkSerializer(bookmark).data, status=status.HTTP_201_CREATED)

    # noinspection PyMethodMayBeStatic
    def retrieve(self, request, pk=None):
        bookmark = services.get_bookmark(actor_from_request(request), int(pk))
        return api_response(BookmarkSerializer(bookmark).data)

    # noinspection PyMethodMayBeStatic
    def destroy(self, request, pk=None):
        services.delete_bookmark(actor_from_request(request), int(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get", "delete"], url_path=r"article/(?P<article_id>\d+)")
    def by_article(self, request, article_id=None):
        """GET tells whether the article is bookmarked; DELETE removes that bookmark."""
        actor = actor_from_request(request)
        if request.method == "DELETE":
            services.delete_bookmark_for_article(actor, int(article_id))
            return Response(status=status.HTTP_204_NO_CONTENT)
        return api_response({"article_id": int(article_id), "bookmarked": services.is_bookmarked(actor, int(article_id))})

    @action(detail=False, methods=["delete"])
    def bulk(self, request):
        serializer = BookmarkBulkDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        deleted = services.delete_bookmarks(actor_from_request(request), serializer.validated_data["bookmark_ids"])
        return api_response({"deleted_count": deleted})

    @action(detail=False, methods=["get"])
    def recent(self, request):
        bookmarks = services.recent_bookmarks(actor_from_request(request), _page_params(request).get("limit"))
        return api_response(BookmarkSerializer(bookmarks, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return api_response(services.bookmark_stats(actor_from_request(request)))

    @action(detail=False, methods=["get"], url_path="by-category")
    def by_category(self, request):
        return api_response(services.bookmarks_by_category(actor_from_request(request)))


__all__ = ["ArticleCommentsView", "CommentViewSet", "BookmarkViewSet"]
