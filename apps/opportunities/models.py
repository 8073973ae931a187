# apps/opportunities/models.py
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.catalog.models import PriceBook, PriceBookEntry, Product
from apps.utils.models import TimestampedModel


class Opportunity(TimestampedModel):
    """
    A sales deal in progress. Its line items are priced from `price_book`.
    """
    class Stage(models.TextChoices):
        PROSPECTING = "prospecting", "Prospecting"
        QUALIFICATION = "qualification", "Qualification"
        PROPOSAL = "proposal", "Proposal"
        NEGOTIATION = "negotiation", "Negotiation"
        CLOSED_WON = "closed_won", "Closed Won"
        CLOSED_LOST = "closed_lost", "Closed Lost"

    name = models.CharField(max_length=255)
    account_name = models.CharField(max_length=255, blank=True)
    stage = models.CharField(max_length=20, choices=Stage.choices, default=Stage.PROSPECTING)
    close_date = models.DateField(null=True, blank=True)
    price_book = models.ForeignKey(
        PriceBook,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="opportunities",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="opportunities",
    )

    class Meta:
        verbose_name_plural = "Opportunities"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["stage", "close_date"], name="opp_stage_close_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def amount(self):
        return sum((item.total_price for item in self.line_items.all()), Decimal("0.00"))


class OpportunityLineItem(TimestampedModel):
    opportunity = models.ForeignKey(Opportunity, on_delete=models.CASCADE, related_name="line_items")
    price_book_entry = models.ForeignKey(PriceBookEntry, on_delete=models.PROTECT, related_name="line_items")
    # Denormalised from price_book_entry so lookups by product skip a join
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="line_items")

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    description = models.TextField(blank=True)
    service_date = models.DateField(null=True, blank=True)
    sort_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sort_order", "created_at"]

    @property
    def total_price(self):
        return self.unit_price * self.quantity

    def __str__(self):
        return f"{self.quantity}x {self.product.name}"
