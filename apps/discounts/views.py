"""
Views for discount campaigns and POS discount calculation.

- Campaign CRUD for back-office tools
- Campaign activation toggle
- Cart discount calculation for the POS
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from .models import DiscountSet
from .serializers import (
    DiscountCalculationSerializer,
    DiscountSetSerializer,
    DiscountSetToggleSerializer,
    EngineResultSerializer,
)
from .services import DiscountCalculationService, build_line_items

logger = logging.getLogger(__name__)


class DiscountSetListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating discount campaigns.

    Query parameters:
    - search: Search by campaign name
    - active: Filter by active flag (true/false)
    """

    serializer_class = DiscountSetSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "created_at", "updated_at"]
    ordering = ["-is_default", "name"]

    def get_queryset(self):
        queryset = DiscountSet.objects.prefetch_related(
            "product_configurations", "batch_configurations"
        )

        search = self.request.query_params.get("search")
        if search:
            queryset = queryset.filter(Q(name__icontains=search))

        active = self.request.query_params.get("active")
        if active is not None:
            queryset = queryset.filter(is_active=active.lower() in ("1", "true", "yes"))

        return queryset

    def perform_create(self, serializer):
        discount_set = serializer.save(
            created_by=self.request.user, updated_by=self.request.user
        )
        logger.info("Discount campaign %r created by %s", discount_set.name, self.request.user)


class DiscountSetDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating and deleting a discount campaign.
    """

    serializer_class = DiscountSetSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "id"

    def get_queryset(self):
        return DiscountSet.objects.prefetch_related(
            "product_configurations", "batch_configurations"
        )

    def perform_update(self, serializer):
        discount_set = serializer.save(updated_by=self.request.user)
        logger.info("Discount campaign %r updated by %s", discount_set.name, self.request.user)

    def perform_destroy(self, instance):
        logger.info("Discount campaign %r deleted by %s", instance.name, self.request.user)
        instance.delete()


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def toggle_discount_set_activation(request, id):
    """
    Activate or deactivate a discount campaign.

    Request body:
    {
        "isActive": true
    }
    """
    discount_set = get_object_or_404(DiscountSet, id=id)

    serializer = DiscountSetToggleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    discount_set.is_active = serializer.validated_data["isActive"]
    discount_set.updated_by = request.user
    discount_set.save(update_fields=["is_active", "updated_by", "updated_at"])

    return Response(DiscountSetSerializer(discount_set).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def calculate_discounts(request):
    """
    Calculate promotional discounts for a POS cart.

    Request body:
    {
        "items": [
            {
                "lineId": "line-1",
                "productId": "SKU-1",
                "quantity": "2",
                "unitPrice": "100.00",
                "batchId": "batch-7" (optional),
                "customDiscount": {"kind": "percentage", "value": "10"} (optional)
            }
        ],
        "discountSetId": "uuid" (optional, uses the active default campaign if omitted)
    }
    """
    serializer = DiscountCalculationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    service = DiscountCalculationService()

    try:
        discount_set = service.get_discount_set(data.get("discountSetId"))
    except DiscountSet.DoesNotExist:
        return Response(
            {"detail": "Discount campaign not found."},
            status=status.HTTP_404_NOT_FOUND,
        )

    try:
        result = service.calculate(build_line_items(data["items"]), discount_set)
    except Exception as e:
        logger.error(f"Discount calculation failed: {str(e)}", exc_info=True)
        return Response(
            {"detail": "Discount calculation failed."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    return Response(EngineResultSerializer(result).data, status=status.HTTP_200_OK)
