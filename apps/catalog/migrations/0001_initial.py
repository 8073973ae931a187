import django.core.validators
import django.db.models.deletion
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PriceBook",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("is_standard", models.BooleanField(default=False)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("product_code", models.CharField(db_index=True, help_text="Human-readable code (e.g. GEN-1000-KW)", max_length=100, unique=True)),
                ("description", models.TextField(blank=True)),
                ("family", models.CharField(blank=True, max_length=100)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [models.Index(fields=["is_active", "family"], name="product_active_family_idx")],
            },
        ),
        migrations.CreateModel(
            name="PriceBookEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("is_active", models.BooleanField(default=True)),
                ("price_book", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="entries", to="catalog.pricebook")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="price_book_entries", to="catalog.product")),
            ],
            options={
                "verbose_name_plural": "Price book entries",
                "ordering": ["price_book__name", "product__name"],
                "indexes": [models.Index(fields=["price_book", "is_active"], name="entry_book_active_idx")],
            },
        ),
        migrations.AddConstraint(
            model_name="pricebook",
            constraint=models.UniqueConstraint(condition=models.Q(("is_standard", True)), fields=("is_standard",), name="uniq_standard_price_book"),
        ),
        migrations.AddConstraint(
            model_name="pricebookentry",
            constraint=models.UniqueConstraint(fields=("price_book", "product"), name="uniq_entry_per_price_book_product"),
        ),
    ]
