from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.utils.permissions import CanChangeOpportunity, CanChangeOpportunityOrReadOnly
from .models import Opportunity, OpportunityLineItem
from .serializers import (
    OpportunitySerializer,
    OpportunityLineItemSerializer,
    ChangePriceBookSerializer,
    PriceBookChangeResultSerializer,
)
from .services import PriceBookChangeService


class OpportunityViewSet(viewsets.ModelViewSet):
    queryset = (
        Opportunity.objects
        .select_related("price_book")
        .prefetch_related("line_items__product")
    )
    serializer_class = OpportunitySerializer
    permission_classes = [CanChangeOpportunityOrReadOnly]
    lookup_value_regex = "[0-9a-fA-F-]{36}"
    filterset_fields = ["stage", "price_book"]

    def perform_create(self, serializer):
        serializer.save(owner=self.request.user)

    @action(
        detail=True,
        methods=["post"],
        url_path="change-price-book",
        permission_classes=[CanChangeOpportunity],
    )
    def change_price_book(self, request, pk=None):
        opportunity = self.get_object()
        serializer = ChangePriceBookSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        d = serializer.validated_data

        result = PriceBookChangeService.change_price_book(
            opportunity_id=opportunity.id,
            price_book_id=d["price_book_id"],
            overwrite_unit_price=d["overwrite_unit_price"],
            stop_if_will_lose_line_items=d["stop_if_will_lose_line_items"],
        )

        opportunity = self.get_queryset().get(pk=opportunity.pk)
        return Response({
            "result": PriceBookChangeResultSerializer(result).data,
            "opportunity": OpportunitySerializer(opportunity).data,
        }, status=status.HTTP_200_OK)


class OpportunityLineItemViewSet(viewsets.ModelViewSet):
    queryset = OpportunityLineItem.objects.select_related("product", "price_book_entry").all()
    serializer_class = OpportunityLineItemSerializer
    permission_classes = [CanChangeOpportunityOrReadOnly]
    filterset_fields = ["opportunity", "product"]
