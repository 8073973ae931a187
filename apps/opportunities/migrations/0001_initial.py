import decimal
import django.core.validators
import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Opportunity",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                ("account_name", models.CharField(blank=True, max_length=255)),
                ("stage", models.CharField(choices=[("prospecting", "Prospecting"), ("qualification", "Qualification"), ("proposal", "Proposal"), ("negotiation", "Negotiation"), ("closed_won", "Closed Won"), ("closed_lost", "Closed Lost")], default="prospecting", max_length=20)),
                ("close_date", models.DateField(blank=True, null=True)),
                ("owner", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="opportunities", to=settings.AUTH_USER_MODEL)),
                ("price_book", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="opportunities", to="catalog.pricebook")),
            ],
            options={
                "verbose_name_plural": "Opportunities",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["stage", "close_date"], name="opp_stage_close_idx")],
            },
        ),
        migrations.CreateModel(
            name="OpportunityLineItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("quantity", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal("0.01"))])),
                ("unit_price", models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ("description", models.TextField(blank=True)),
                ("service_date", models.DateField(blank=True, null=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("opportunity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="line_items", to="opportunities.opportunity")),
                ("price_book_entry", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="line_items", to="catalog.pricebookentry")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="line_items", to="catalog.product")),
            ],
            options={
                "ordering": ["sort_order", "created_at"],
            },
        ),
    ]
