"""Routing for categories and channels."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import CategoryViewSet, ChannelViewSet

router = SimpleRouter()
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"channels", ChannelViewSet, basename="channel")

urlpatterns = [
    path("", include(router.urls)),
]
