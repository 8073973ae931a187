from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from apps.utils.permissions import IsStaffOrReadOnly
from .models import Product, PriceBook, PriceBookEntry
from .serializers import ProductSerializer, PriceBookSerializer, PriceBookEntrySerializer


class ProductViewSet(viewsets.ModelViewSet):
    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    permission_classes = [IsStaffOrReadOnly]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["is_active", "family"]
    search_fields = ["name", "product_code"]


class PriceBookViewSet(viewsets.ModelViewSet):
    queryset = PriceBook.objects.all()
    serializer_class = PriceBookSerializer
    permission_classes = [IsStaffOrReadOnly]
    filterset_fields = ["is_active", "is_standard"]


class PriceBookEntryViewSet(viewsets.ModelViewSet):
    queryset = PriceBookEntry.objects.select_related("price_book", "product").all()
    serializer_class = PriceBookEntrySerializer
    permission_classes = [IsStaffOrReadOnly]
    filterset_fields = ["price_book", "product", "is_active"]
