"""Staff endpoints for managing coupons."""

from common.exceptions import ShopError
from common.responses import error_response
from drf_spectacular.utils import OpenApiExample, extend_schema, extend_schema_view, inline_serializer
from rest_framework import serializers as rf_serializers
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from users.permissions import IsStaffRole

from .models import Coupon
from .serializers import CouponSerializer, CouponStatusSerializer
from .services import check_coupon


@extend_schema_view(
    list=extend_schema(tags=["Coupon Endpoints"], summary="List coupons"),
    retrieve=extend_schema(tags=["Coupon Endpoints"], summary="Get coupon"),
    create=extend_schema(tags=["Coupon Endpoints"], summary="Create coupon"),
    update=extend_schema(tags=["Coupon Endpoints"], summary="Update coupon"),
    partial_update=extend_schema(tags=["Coupon Endpoints"], summary="Partial update coupon"),
    destroy=extend_schema(tags=["Coupon Endpoints"], summary="Delete coupon"),
)
class CouponViewSet(viewsets.ModelViewSet):
    queryset = Coupon.objects.all()
    serializer_class = CouponSerializer
    permission_classes = [IsStaffRole]
    throttle_scope = "coupons"
    filterset_fields = ["name"]
    ordering_fields = ["expire", "discount", "name"]

    @extend_schema(
        tags=["Coupon Endpoints"],
        summary="Check coupon status",
        description="Returns the coupon's name and discount when it exists and has not expired.",
        request=CouponStatusSerializer,
        responses={
            200: inline_serializer(
                name="CouponStatusResponse",
                fields={"name": rf_serializers.CharField(), "discount": rf_serializers.CharField()},
            ),
            400: inline_serializer(
                name="CouponStatusError",
                fields={"detail": rf_serializers.CharField(), "code": rf_serializers.CharField()},
            ),
        },
        examples=[
            OpenApiExample("Usable", value={"name": "SUMMER20", "discount": "20.00"}),
            OpenApiExample("Expired", value={"detail": "Coupon SUMMER20 has expired", "code": "expired_coupon"}),
        ],
    )
    @action(detail=False, methods=["post"], url_path="status")
    def check_status(self, request):
        serializer = CouponStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            coupon = check_coupon(serializer.validated_data["name"])
        except ShopError as exc:
            return error_response(exc)
        return Response({"name": coupon.name, "discount": str(coupon.discount)}, status=status.HTTP_200_OK)
