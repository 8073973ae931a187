# apps/catalog/serializers.py
from rest_framework import serializers
from .models import Product, PriceBook, PriceBookEntry


class ProductSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "product_code", "description", "family", "is_active"]


class PriceBookSerializer(serializers.ModelSerializer):
    entry_count = serializers.IntegerField(source="entries.count", read_only=True)

    class Meta:
        model = PriceBook
        fields = ["id", "name", "description", "is_active", "is_standard", "entry_count"]


class PriceBookEntrySerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    price_book_name = serializers.CharField(source="price_book.name", read_only=True)

    class Meta:
        model = PriceBookEntry
        fields = [
            "id",
            "price_book",
            "price_book_name",
            "product",
            "product_name",
            "unit_price",
            "is_active",
        ]

    def validate(self, attrs):
        # Line items copy product from their entry, so an entry keeps its book and product
        if self.instance is not None:
            for locked_field in ("price_book", "product"):
                if locked_field in attrs and attrs[locked_field] != getattr(self.instance, locked_field):
                    raise serializers.ValidationError(
                        {locked_field: "Cannot be changed on an existing price book entry."}
                    )
        return attrs
