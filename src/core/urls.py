"""Root URL configuration for the news portal API."""
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

from authentication.urls import users_router

urlpatterns = [
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("auth/", include("authentication.urls")),
    path("", include(users_router.urls)),
    path("", include("catalog.urls")),
    path("", include("engagement.urls")),
    path("", include("articles.urls")),
]
