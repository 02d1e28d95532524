"""Staff router for catalog write endpoints."""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .admin_views import ProductAdminViewSet

router = SimpleRouter()
router.register(r"products", ProductAdminViewSet, basename="admin-product")

urlpatterns = [path("", include(router.urls))]
