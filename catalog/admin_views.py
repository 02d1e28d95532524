"""Staff viewsets for catalog write endpoints.

Endpoints are restricted to admin and manager roles and use scoped throttling.
Stock counters move through `inventory.services` once a product exists; the
`quantity` field here is the restock entry point. Page view reports are
admin-only.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from users.permissions import IsAdminRole, IsStaffRole

from . import selectors
from .admin_serializers import (
    DailyViewsSerializer,
    ProductAdminSerializer,
    ProductViewsSerializer,
    ViewsRangeSerializer,
)
from .models import Product


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (staff)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (staff)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create product"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update product"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete product"),
)
class ProductAdminViewSet(viewsets.ModelViewSet):
    permission_classes = [IsStaffRole]
    throttle_scope = "catalog_admin_write"
    queryset = Product.objects.all().order_by("title")
    serializer_class = ProductAdminSerializer

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Most viewed products",
        responses={200: ProductViewsSerializer(many=True)},
    )
    @action(detail=False, methods=["get"], url_path="views", permission_classes=[IsAdminRole])
    def views_ranking(self, request):
        page = self.paginate_queryset(selectors.most_viewed_products())
        data = ProductViewsSerializer(page, many=True).data
        return self.get_paginated_response(data)

    @extend_schema(
        tags=["Admin Endpoints"],
        summary="Daily unique views of a product",
        parameters=[
            OpenApiParameter("start_date", OpenApiTypes.DATE, location="query", description="First day (inclusive)"),
            OpenApiParameter("end_date", OpenApiTypes.DATE, location="query", description="Last day (inclusive)"),
        ],
        responses={200: DailyViewsSerializer(many=True)},
    )
    @action(detail=True, methods=["get"], url_path="views", permission_classes=[IsAdminRole])
    def daily_views(self, request, pk=None):
        product = self.get_object()
        params = ViewsRangeSerializer(data=request.query_params)
        params.is_valid(raise_exception=True)
        rows = selectors.daily_views(
            product_id=product.pk,
            start=params.validated_data.get("start_date"),
            end=params.validated_data.get("end_date"),
        )
        return Response(DailyViewsSerializer(rows, many=True).data)
