# apps/catalog/models.py
from django.core.validators import MinValueValidator
from django.db import models

from apps.utils.models import TimestampedModel


class Product(TimestampedModel):
    """
    Sellable product. Prices live on PriceBookEntry, never here.
    """
    name = models.CharField(max_length=255)
    product_code = models.CharField(
        max_length=100,
        unique=True,
        db_index=True,
        help_text="Human-readable code (e.g. GEN-1000-KW)",
    )
    description = models.TextField(blank=True)
    family = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["is_active", "family"], name="product_active_family_idx"),
        ]

    def __str__(self):
        return f"{self.product_code} - {self.name}"


class PriceBook(TimestampedModel):
    """
    Named collection of product prices (e.g. 'Standard', 'Partner 2026').
    """
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    is_standard = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_standard"],
                condition=models.Q(is_standard=True),
                name="uniq_standard_price_book",
            )
        ]

    def __str__(self):
        return self.name


class PriceBookEntry(TimestampedModel):
    """
    One product's price inside one price book.
    """
    price_book = models.ForeignKey(
        PriceBook,
        on_delete=models.CASCADE,
        related_name="entries",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="price_book_entries",
    )
    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name_plural = "Price book entries"
        ordering = ["price_book__name", "product__name"]
        indexes = [
            models.Index(fields=["price_book", "is_active"], name="entry_book_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["price_book", "product"],
                name="uniq_entry_per_price_book_product",
            )
        ]

    def __str__(self):
        return f"{self.price_book.name}: {self.product.name} @ {self.unit_price}"
