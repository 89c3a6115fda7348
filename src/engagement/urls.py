"""Routing for comments and bookmarks."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ArticleCommentsView, BookmarkViewSet, CommentViewSet

router = SimpleRouter()
router.register(r"comments", CommentViewSet, basename="comment")
router.register(r"bookmarks", BookmarkViewSet, basename="bookmark")

urlpatterns = [
    path("articles/<int:article_id>/comments/", ArticleCommentsView.as_view(), name="article-comments"),
    path("", include(router.urls)),
]
