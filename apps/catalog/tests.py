# apps/catalog/tests.py
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from apps.catalog.models import Product, PriceBook, PriceBookEntry


User = get_user_model()


class PriceBookModelTests(TestCase):
    def setUp(self):
        self.product = Product.objects.create(name="Copper Cable", product_code="CBL-10")
        self.book = PriceBook.objects.create(name="Standard", is_standard=True)

    def test_one_entry_per_product_per_book(self):
        PriceBookEntry.objects.create(price_book=self.book, product=self.product, unit_price="10.00")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PriceBookEntry.objects.create(
                    price_book=self.book, product=self.product, unit_price="11.00"
                )

    def test_only_one_standard_book(self):
        PriceBook.objects.create(name="Partner")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PriceBook.objects.create(name="Another standard", is_standard=True)

    def test_str(self):
        entry = PriceBookEntry.objects.create(
            price_book=self.book, product=self.product, unit_price=Decimal("10.00")
        )
        self.assertEqual(str(self.product), "CBL-10 - Copper Cable")
        self.assertEqual(str(entry), "Standard: Copper Cable @ 10.00")


class CatalogAPITests(APITestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="rep", password="testpass123")
        self.staff = User.objects.create_user(username="ops", password="testpass123", is_staff=True)

        self.cable = Product.objects.create(name="Copper Cable", product_code="CBL-10")
        self.plan = Product.objects.create(name="Service Plan", product_code="SVC-1Y")
        self.standard = PriceBook.objects.create(name="Standard", is_standard=True)
        self.partner = PriceBook.objects.create(name="Partner")
        PriceBookEntry.objects.create(price_book=self.standard, product=self.cable, unit_price="10.00")
        PriceBookEntry.objects.create(price_book=self.standard, product=self.plan, unit_price="250.00")
        PriceBookEntry.objects.create(price_book=self.partner, product=self.cable, unit_price="8.50")

    def test_list_entries_filtered_by_price_book(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("price-book-entry-list"), {"price_book": str(self.partner.id)})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["results"][0]["product_name"], "Copper Cable")

    def test_price_book_reports_entry_count(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("price-book-detail", kwargs={"pk": str(self.standard.id)}))

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["entry_count"], 2)

    def test_non_staff_cannot_write(self):
        self.client.force_authenticate(self.user)
        resp = self.client.post(
            reverse("product-list"), {"name": "Hosting", "product_code": "HST-1"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_can_create_product(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.post(
            reverse("product-list"), {"name": "Hosting", "product_code": "HST-1"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(Product.objects.filter(product_code="HST-1").exists())

    def test_search_products(self):
        self.client.force_authenticate(self.user)
        resp = self.client.get(reverse("product-list"), {"search": "SVC"})

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["name"] for p in resp.data["results"]], ["Service Plan"])

    def test_entry_in_use_cannot_be_deleted(self):
        from apps.opportunities.models import Opportunity
        from apps.opportunities.services import LineItemService

        entry = PriceBookEntry.objects.get(price_book=self.standard, product=self.cable)
        opportunity = Opportunity.objects.create(name="Depot rewiring", price_book=self.standard)
        LineItemService.add_line_item(opportunity, entry, quantity=Decimal("5"))
        self.client.force_authenticate(self.staff)

        resp = self.client.delete(reverse("price-book-entry-detail", kwargs={"pk": str(entry.id)}))

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "protected")
        self.assertTrue(PriceBookEntry.objects.filter(id=entry.id).exists())

    def test_entry_product_and_book_are_fixed_once_created(self):
        from apps.opportunities.models import Opportunity
        from apps.opportunities.services import LineItemService

        entry = PriceBookEntry.objects.get(price_book=self.standard, product=self.cable)
        opportunity = Opportunity.objects.create(name="Depot rewiring", price_book=self.standard)
        line = LineItemService.add_line_item(opportunity, entry, quantity=Decimal("5"))
        hosting = Product.objects.create(name="Hosting", product_code="HST-1")
        reseller = PriceBook.objects.create(name="Reseller")
        url = reverse("price-book-entry-detail", kwargs={"pk": str(entry.id)})
        self.client.force_authenticate(self.staff)

        resp = self.client.patch(url, {"product": str(hosting.id)}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("product", resp.data)

        resp = self.client.patch(url, {"price_book": str(reseller.id)}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("price_book", resp.data)

        entry.refresh_from_db()
        line.refresh_from_db()
        self.assertEqual(entry.product_id, self.cable.id)
        self.assertEqual(entry.price_book_id, self.standard.id)
        self.assertEqual(line.product_id, line.price_book_entry.product_id)

    def test_staff_can_reprice_entry(self):
        entry = PriceBookEntry.objects.get(price_book=self.standard, product=self.cable)
        self.client.force_authenticate(self.staff)

        resp = self.client.patch(
            reverse("price-book-entry-detail", kwargs={"pk": str(entry.id)}),
            {"unit_price": "12.00", "product": str(self.cable.id)},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        entry.refresh_from_db()
        self.assertEqual(entry.unit_price, Decimal("12.00"))
