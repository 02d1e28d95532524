"""Staff views for the stock ledger and manual adjustments."""

from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from rest_framework import generics, status
from rest_framework import serializers as rf_serializers
from rest_framework.response import Response
from rest_framework.views import APIView
from users.permissions import IsStaffRole

from .selectors import list_movements
from .serializers import RestockSerializer, StockMovementSerializer
from .services import restock


class MovementListView(generics.ListAPIView):
    permission_classes = [IsStaffRole]
    throttle_scope = "inventory"
    serializer_class = StockMovementSerializer

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="List stock movements",
        description="List ledger rows. Filters: product_id, reason, reference, created_after (ISO).",
        parameters=[
            OpenApiParameter("product_id", int, location="query"),
            OpenApiParameter("reason", str, location="query"),
            OpenApiParameter("reference", str, location="query"),
            OpenApiParameter("created_after", str, location="query"),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def get_queryset(self):
        params = self.request.query_params
        return list_movements(
            product_id=params.get("product_id"),
            reason=params.get("reason"),
            reference=params.get("reference"),
            created_after=params.get("created_after"),
        )


class RestockView(APIView):
    permission_classes = [IsStaffRole]
    throttle_scope = "inventory"

    @extend_schema(
        tags=["Inventory Endpoints"],
        summary="Adjust available stock",
        description="Adds (positive) or writes off (negative) available stock for one product.",
        request=RestockSerializer,
        responses={
            200: inline_serializer(name="RestockResponse", fields={"applied": rf_serializers.BooleanField()}),
            400: inline_serializer(name="RestockError", fields={"detail": rf_serializers.CharField()}),
        },
        examples=[OpenApiExample("Applied", value={"applied": True})],
    )
    def post(self, request):
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = restock(**serializer.validated_data)
        if not report.ok:
            return Response({"detail": report.failed[0].reason}, status=status.HTTP_400_BAD_REQUEST)
        return Response({"applied": True}, status=status.HTTP_200_OK)
