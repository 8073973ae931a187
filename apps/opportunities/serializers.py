# apps/opportunities/serializers.py
from django.conf import settings
from rest_framework import serializers

from apps.catalog.models import PriceBookEntry
from .models import Opportunity, OpportunityLineItem
from .services import LineItemService


class OpportunityLineItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    total_price = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    price_book_entry = serializers.PrimaryKeyRelatedField(
        queryset=PriceBookEntry.objects.select_related("product", "price_book")
    )

    class Meta:
        model = OpportunityLineItem
        fields = [
            "id",
            "opportunity",
            "price_book_entry",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "total_price",
            "description",
            "service_date",
            "sort_order",
        ]
        read_only_fields = ["product"]
        extra_kwargs = {"sort_order": {"required": False}}

    def validate(self, attrs):
        # Entry and opportunity are fixed once the line exists
        if self.instance is not None:
            for locked_field in ("opportunity", "price_book_entry"):
                if locked_field in attrs and attrs[locked_field] != getattr(self.instance, locked_field):
                    raise serializers.ValidationError(
                        {locked_field: "Cannot be changed on an existing line item."}
                    )
        return attrs

    def create(self, validated_data):
        return LineItemService.add_line_item(
            opportunity=validated_data["opportunity"],
            price_book_entry=validated_data["price_book_entry"],
            quantity=validated_data["quantity"],
            unit_price=validated_data.get("unit_price"),
            description=validated_data.get("description", ""),
            service_date=validated_data.get("service_date"),
            sort_order=validated_data.get("sort_order"),
        )


class OpportunitySerializer(serializers.ModelSerializer):
    price_book_name = serializers.CharField(source="price_book.name", read_only=True, default=None)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    line_items = OpportunityLineItemSerializer(many=True, read_only=True)

    class Meta:
        model = Opportunity
        fields = [
            "id",
            "name",
            "account_name",
            "stage",
            "close_date",
            "price_book",
            "price_book_name",
            "owner",
            "amount",
            "line_items",
            "created_at",
            "updated_at",
        ]
        # Price book moves only through the change-price-book action
        read_only_fields = ["price_book", "owner", "created_at", "updated_at"]


class ChangePriceBookSerializer(serializers.Serializer):
    """
    Input of the opportunity detail route (snake_case).
    """
    price_book_id = serializers.UUIDField()
    overwrite_unit_price = serializers.BooleanField(default=False)
    stop_if_will_lose_line_items = serializers.BooleanField(default=False)


class PriceBookChangeResultSerializer(serializers.Serializer):
    will_lose_line_items = serializers.BooleanField()
    missing_product_names = serializers.CharField(source="missing_product_names_display")
    applied = serializers.BooleanField()
    deleted_count = serializers.IntegerField()
    created_count = serializers.IntegerField()


class ChangePriceBookInputSerializer(serializers.Serializer):
    """
    One input of the invocable action. Field names follow the action contract.
    """
    opportunityId = serializers.UUIDField()
    priceBookId = serializers.UUIDField()
    overwriteUnitPrice = serializers.BooleanField()
    stopIfWillLoseLineItems = serializers.BooleanField()


class ChangePriceBookRequestSerializer(serializers.Serializer):
    inputs = ChangePriceBookInputSerializer(many=True, allow_empty=False)

    def validate_inputs(self, value):
        limit = settings.PRICEBOOK_ACTION_MAX_INPUTS
        if len(value) > limit:
            raise serializers.ValidationError(f"At most {limit} inputs per call.")
        return value
