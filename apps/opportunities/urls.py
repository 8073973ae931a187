from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .actions import ChangePriceBookActionView
from .views import OpportunityViewSet, OpportunityLineItemViewSet

router = SimpleRouter()
router.register(r"line-items", OpportunityLineItemViewSet, basename="opportunity-line-item")
router.register(r"", OpportunityViewSet, basename="opportunity")

urlpatterns = [
    path(
        "actions/change-price-book/",
        ChangePriceBookActionView.as_view(),
        name="action-change-price-book",
    ),
    path("", include(router.urls)),
]
