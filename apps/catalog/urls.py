from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import ProductViewSet, PriceBookViewSet, PriceBookEntryViewSet

router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"price-books", PriceBookViewSet, basename="price-book")
router.register(r"price-book-entries", PriceBookEntryViewSet, basename="price-book-entry")

urlpatterns = [
    path("", include(router.urls)),
]
