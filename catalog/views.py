"""Read-only catalog browsing endpoints."""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle

from . import selectors, services
from .serializers import ProductDetailSerializer, ProductListSerializer
from .throttling import CatalogScopedRateThrottle


@extend_schema_view(
    list=extend_schema(
        summary="List products",
        description=(
            "Returns published products. Supports ordering by `title`, `price`, `sold` or `created_at`, "
            "and search via either `search` or `q`."
        ),
        tags=["Catalog Endpoints"],
        parameters=[
            OpenApiParameter("ordering", OpenApiTypes.STR, location="query", description="Order by a product field"),
            OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Search products by text"),
            OpenApiParameter("q", OpenApiTypes.STR, location="query", description="Alias for `search`"),
        ],
    ),
    retrieve=extend_schema(
        summary="Get product by slug",
        description="Returns a published product with price and stock counters. The first visit from each client IP "
        "is counted in `views`.",
        tags=["Catalog Endpoints"],
    ),
)
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"
    throttle_scope = "catalog"
    throttle_classes = [CatalogScopedRateThrottle, UserRateThrottle, AnonRateThrottle]

    # Support both `search` and `q` query params for search
    class QSearchFilter(drf_filters.SearchFilter):
        search_param = "q"

    filter_backends = [drf_filters.OrderingFilter, drf_filters.SearchFilter, QSearchFilter]
    ordering_fields = ["title", "price", "sold", "created_at"]
    search_fields = ["title", "description"]

    def get_queryset(self):
        return selectors.list_products()

    def get_serializer_class(self):
        return ProductDetailSerializer if self.action == "retrieve" else ProductListSerializer

    def retrieve(self, request, *args, **kwargs):
        product = self.get_object()
        if services.record_view(product=product, ip_address=services.client_ip(request)):
            product.views += 1
        return Response(self.get_serializer(product).data)
