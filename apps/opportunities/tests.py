# apps/opportunities/tests.py
import uuid
from decimal import Decimal
from io import StringIO

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from apps.catalog.models import Product, PriceBook, PriceBookEntry
from apps.utils.exceptions import BusinessLogicException
from apps.opportunities.models import Opportunity
from apps.opportunities.services import LineItemService, PriceBookChangeService


User = get_user_model()


class PriceBookFixtureMixin:
    """
    Two price books. 'Partner' carries the generator and the cable but not the
    service plan, and lists the cable at a different price.
    """

    def create_catalog(self):
        self.generator = Product.objects.create(name="Generator 1000kW", product_code="GEN-1000")
        self.cable = Product.objects.create(name="Copper Cable", product_code="CBL-10")
        self.service_plan = Product.objects.create(name="Service Plan", product_code="SVC-1Y")

        self.standard = PriceBook.objects.create(name="Standard", is_standard=True)
        self.partner = PriceBook.objects.create(name="Partner")

        self.std_generator = PriceBookEntry.objects.create(
            price_book=self.standard, product=self.generator, unit_price=Decimal("1000.00")
        )
        self.std_cable = PriceBookEntry.objects.create(
            price_book=self.standard, product=self.cable, unit_price=Decimal("10.00")
        )
        self.std_service = PriceBookEntry.objects.create(
            price_book=self.standard, product=self.service_plan, unit_price=Decimal("250.00")
        )

        self.partner_generator = PriceBookEntry.objects.create(
            price_book=self.partner, product=self.generator, unit_price=Decimal("900.00")
        )
        self.partner_cable = PriceBookEntry.objects.create(
            price_book=self.partner, product=self.cable, unit_price=Decimal("8.50")
        )

        self.opportunity = Opportunity.objects.create(
            name="Hospital backup power", account_name="City Hospital", price_book=self.standard
        )

    def add_line(self, entry, quantity="1", unit_price=None, description=""):
        return LineItemService.add_line_item(
            opportunity=self.opportunity,
            price_book_entry=entry,
            quantity=Decimal(quantity),
            unit_price=unit_price,
            description=description,
        )


class PriceBookChangeServiceTests(PriceBookFixtureMixin, TestCase):
    def setUp(self):
        self.create_catalog()

    def test_opportunity_without_line_items_just_switches(self):
        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=True
        )

        self.assertFalse(result.will_lose_line_items)
        self.assertEqual(result.missing_product_names_display, "")
        self.assertEqual(result.deleted_count, 0)
        self.assertEqual(result.created_count, 0)
        self.assertTrue(result.applied)
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.partner)

    def test_all_products_available_recreates_every_line(self):
        self.add_line(self.std_generator, quantity="2", description="Main unit")
        self.add_line(self.std_cable, quantity="150")

        result = PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        self.assertFalse(result.will_lose_line_items)
        self.assertEqual(result.missing_product_names, [])
        self.assertEqual(result.deleted_count, 2)
        self.assertEqual(result.created_count, 2)

        lines = list(self.opportunity.line_items.order_by("sort_order"))
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0].price_book_entry, self.partner_generator)
        self.assertEqual(lines[0].quantity, Decimal("2.00"))
        self.assertEqual(lines[0].description, "Main unit")
        self.assertEqual(lines[1].price_book_entry, self.partner_cable)
        self.assertEqual(lines[1].quantity, Decimal("150.00"))

    def test_unit_prices_are_kept_by_default(self):
        self.add_line(self.std_generator, unit_price=Decimal("950.00"))
        self.add_line(self.std_cable)

        PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        prices = {
            line.product_id: line.unit_price for line in self.opportunity.line_items.all()
        }
        self.assertEqual(prices[self.generator.id], Decimal("950.00"))
        self.assertEqual(prices[self.cable.id], Decimal("10.00"))

    def test_overwrite_unit_price_uses_target_entry_price(self):
        self.add_line(self.std_generator, unit_price=Decimal("950.00"))
        self.add_line(self.std_cable)

        PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, overwrite_unit_price=True
        )

        for line in self.opportunity.line_items.select_related("price_book_entry"):
            self.assertEqual(line.unit_price, line.price_book_entry.unit_price)
            self.assertEqual(line.price_book_entry.price_book, self.partner)

    def test_missing_product_is_reported_by_name(self):
        self.add_line(self.std_generator)
        self.add_line(self.std_service)

        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=True
        )

        self.assertTrue(result.will_lose_line_items)
        self.assertEqual(result.missing_product_names, ["Service Plan"])
        self.assertEqual(result.as_output_values(), {
            "willLoseLineItems": True,
            "missingProductNames": "Service Plan",
        })

    def test_stop_if_will_lose_makes_no_changes(self):
        self.add_line(self.std_generator)
        self.add_line(self.std_service)
        original_ids = set(self.opportunity.line_items.values_list("id", flat=True))

        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=True
        )

        self.assertFalse(result.applied)
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.standard)
        self.assertEqual(
            set(self.opportunity.line_items.values_list("id", flat=True)), original_ids
        )

    def test_losing_products_is_allowed_when_not_stopping(self):
        self.add_line(self.std_generator)
        self.add_line(self.std_service)
        self.add_line(self.std_cable)

        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=False
        )

        self.assertTrue(result.applied)
        self.assertTrue(result.will_lose_line_items)
        self.assertEqual(result.deleted_count, 3)
        self.assertEqual(result.created_count, 2)
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.partner)
        self.assertEqual(
            set(self.opportunity.line_items.values_list("product_id", flat=True)),
            {self.generator.id, self.cable.id},
        )

    def test_inactive_target_entry_counts_as_missing(self):
        self.partner_cable.is_active = False
        self.partner_cable.save()
        self.add_line(self.std_cable)

        result = PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        self.assertTrue(result.will_lose_line_items)
        self.assertEqual(result.missing_product_names_display, "Copper Cable")
        self.assertEqual(self.opportunity.line_items.count(), 0)

    def test_missing_names_are_joined_and_listed_once(self):
        hosting = Product.objects.create(name="Hosting", product_code="HST-1")
        std_hosting = PriceBookEntry.objects.create(
            price_book=self.standard, product=hosting, unit_price=Decimal("99.00")
        )
        self.add_line(self.std_service)
        self.add_line(std_hosting)
        self.add_line(self.std_service, description="Second year")

        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=True
        )

        self.assertEqual(result.missing_product_names_display, "Service Plan, Hosting")

    def test_products_sharing_a_name_are_matched_by_identity(self):
        lookalike = Product.objects.create(name="Copper Cable", product_code="CBL-20")
        std_lookalike = PriceBookEntry.objects.create(
            price_book=self.standard, product=lookalike, unit_price=Decimal("12.00")
        )
        self.add_line(self.std_cable)
        self.add_line(std_lookalike)

        result = PriceBookChangeService.change_price_book(
            self.opportunity.id, self.partner.id, stop_if_will_lose_line_items=True
        )

        self.assertTrue(result.will_lose_line_items)
        self.assertEqual(result.missing_product_names, ["Copper Cable"])
        self.assertFalse(result.applied)

    def test_repeated_product_keeps_every_line(self):
        self.add_line(self.std_cable, quantity="10", description="Site A")
        self.add_line(self.std_cable, quantity="20", description="Site B")

        result = PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        self.assertEqual(result.created_count, 2)
        self.assertEqual(
            list(self.opportunity.line_items.order_by("sort_order").values_list("description", flat=True)),
            ["Site A", "Site B"],
        )

    def test_new_lines_only_reference_original_products(self):
        self.add_line(self.std_generator)

        PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        self.assertEqual(
            list(self.opportunity.line_items.values_list("product_id", flat=True)),
            [self.generator.id],
        )

    def test_unknown_opportunity_raises(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            PriceBookChangeService.change_price_book(uuid.uuid4(), self.partner.id)
        self.assertEqual(ctx.exception.code, "opportunity_not_found")

    def test_malformed_identifier_raises(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            PriceBookChangeService.change_price_book("not-a-uuid", self.partner.id)
        self.assertEqual(ctx.exception.code, "opportunity_not_found")

    def test_unknown_price_book_raises(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            PriceBookChangeService.change_price_book(self.opportunity.id, uuid.uuid4())
        self.assertEqual(ctx.exception.code, "price_book_not_found")

    def test_inactive_price_book_is_rejected(self):
        self.partner.is_active = False
        self.partner.save()
        self.add_line(self.std_generator)

        with self.assertRaises(BusinessLogicException) as ctx:
            PriceBookChangeService.change_price_book(self.opportunity.id, self.partner.id)

        self.assertEqual(ctx.exception.code, "price_book_inactive")
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.standard)
        self.assertEqual(self.opportunity.line_items.count(), 1)


class LineItemServiceTests(PriceBookFixtureMixin, TestCase):
    def setUp(self):
        self.create_catalog()

    def test_unit_price_defaults_to_entry_price(self):
        line = self.add_line(self.std_generator, quantity="3")

        self.assertEqual(line.unit_price, Decimal("1000.00"))
        self.assertEqual(line.product, self.generator)
        self.assertEqual(line.total_price, Decimal("3000.00"))

    def test_sort_order_is_appended(self):
        first = self.add_line(self.std_generator)
        second = self.add_line(self.std_cable)

        self.assertEqual(first.sort_order, 0)
        self.assertEqual(second.sort_order, 1)

    def test_opportunity_without_price_book_adopts_entry_book(self):
        self.opportunity = Opportunity.objects.create(name="Fresh deal")

        self.add_line(self.partner_cable)

        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.partner)

    def test_entry_from_other_price_book_is_rejected(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            self.add_line(self.partner_cable)
        self.assertEqual(ctx.exception.code, "price_book_mismatch")

    def test_inactive_entry_is_rejected(self):
        self.std_cable.is_active = False
        self.std_cable.save()

        with self.assertRaises(BusinessLogicException) as ctx:
            self.add_line(self.std_cable)
        self.assertEqual(ctx.exception.code, "inactive_entry")

    def test_amount_sums_line_totals(self):
        self.add_line(self.std_generator, quantity="2")
        self.add_line(self.std_cable, quantity="5")

        self.assertEqual(self.opportunity.amount, Decimal("2050.00"))


class ChangePriceBookActionAPITests(PriceBookFixtureMixin, APITestCase):
    def setUp(self):
        self.create_catalog()
        self.client = APIClient()
        self.staff = User.objects.create_user(
            username="ops", password="testpass123", is_staff=True
        )
        self.rep = User.objects.create_user(username="rep", password="testpass123")
        self.url = reverse("action-change-price-book")

    def _input(self, opportunity=None, price_book=None, overwrite=False, stop=False):
        return {
            "opportunityId": str((opportunity or self.opportunity).id),
            "priceBookId": str((price_book or self.partner).id),
            "overwriteUnitPrice": overwrite,
            "stopIfWillLoseLineItems": stop,
        }

    def test_describe_action(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.get(self.url)

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["category"], "Opportunity")
        self.assertEqual(
            [p["name"] for p in resp.data["inputs"]],
            ["opportunityId", "priceBookId", "overwriteUnitPrice", "stopIfWillLoseLineItems"],
        )
        self.assertEqual(
            [p["name"] for p in resp.data["outputs"]],
            ["willLoseLineItems", "missingProductNames"],
        )

    def test_requires_authentication(self):
        resp = self.client.post(self.url, {"inputs": [self._input()]}, format="json")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_requires_change_permission(self):
        self.client.force_authenticate(self.rep)
        resp = self.client.post(self.url, {"inputs": [self._input()]}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_invoke_returns_output_values(self):
        self.add_line(self.std_generator)
        self.add_line(self.std_service)
        self.client.force_authenticate(self.staff)

        resp = self.client.post(
            self.url, {"inputs": [self._input(stop=True)]}, format="json"
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertTrue(resp.data[0]["isSuccess"])
        self.assertEqual(resp.data[0]["outputValues"], {
            "willLoseLineItems": True,
            "missingProductNames": "Service Plan",
        })
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.standard)

    def test_batch_processes_every_input(self):
        other = Opportunity.objects.create(name="Second site", price_book=self.standard)
        self.add_line(self.std_cable)
        self.client.force_authenticate(self.staff)

        resp = self.client.post(
            self.url,
            {"inputs": [self._input(), self._input(opportunity=other)]},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 2)
        other.refresh_from_db()
        self.opportunity.refresh_from_db()
        self.assertEqual(other.price_book, self.partner)
        self.assertEqual(self.opportunity.price_book, self.partner)

    def test_failing_input_rolls_back_the_whole_batch(self):
        self.add_line(self.std_cable)
        self.client.force_authenticate(self.staff)
        bad = self._input()
        bad["opportunityId"] = str(uuid.uuid4())

        resp = self.client.post(self.url, {"inputs": [self._input(), bad]}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "opportunity_not_found")
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.standard)
        self.assertEqual(
            self.opportunity.line_items.get().price_book_entry, self.std_cable
        )

    def test_required_inputs_are_validated(self):
        self.client.force_authenticate(self.staff)
        incomplete = self._input()
        del incomplete["stopIfWillLoseLineItems"]

        resp = self.client.post(self.url, {"inputs": [incomplete]}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("inputs", resp.data)

    def test_empty_batch_is_rejected(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.post(self.url, {"inputs": []}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    @override_settings(PRICEBOOK_ACTION_MAX_INPUTS=1)
    def test_batch_size_is_limited(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.post(
            self.url, {"inputs": [self._input(), self._input()]}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class OpportunityAPITests(PriceBookFixtureMixin, APITestCase):
    def setUp(self):
        self.create_catalog()
        self.client = APIClient()
        self.staff = User.objects.create_user(
            username="ops", password="testpass123", is_staff=True
        )
        self.client.force_authenticate(self.staff)

    def test_change_price_book_detail_route(self):
        self.add_line(self.std_generator, unit_price=Decimal("950.00"))
        url = reverse("opportunity-change-price-book", kwargs={"pk": str(self.opportunity.id)})

        resp = self.client.post(url, {
            "price_book_id": str(self.partner.id),
            "overwrite_unit_price": True,
        }, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.data["result"]["applied"])
        self.assertEqual(resp.data["result"]["created_count"], 1)
        self.assertEqual(resp.data["opportunity"]["price_book"], self.partner.id)
        self.assertEqual(
            Decimal(resp.data["opportunity"]["line_items"][0]["unit_price"]), Decimal("900.00")
        )

    def test_price_book_is_read_only_on_update(self):
        url = reverse("opportunity-detail", kwargs={"pk": str(self.opportunity.id)})

        resp = self.client.patch(url, {"price_book": str(self.partner.id)}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.standard)

    def test_create_line_item_through_api(self):
        url = reverse("opportunity-line-item-list")

        resp = self.client.post(url, {
            "opportunity": str(self.opportunity.id),
            "price_book_entry": str(self.std_cable.id),
            "quantity": "4",
        }, format="json")

        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(resp.data["unit_price"]), Decimal("10.00"))
        self.assertEqual(resp.data["product"], self.cable.id)

    def test_create_line_item_from_wrong_price_book(self):
        url = reverse("opportunity-line-item-list")

        resp = self.client.post(url, {
            "opportunity": str(self.opportunity.id),
            "price_book_entry": str(self.partner_cable.id),
            "quantity": "4",
        }, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "price_book_mismatch")

    def test_line_item_entry_cannot_be_swapped(self):
        line = self.add_line(self.std_cable)
        url = reverse("opportunity-line-item-detail", kwargs={"pk": str(line.id)})

        resp = self.client.patch(url, {"price_book_entry": str(self.std_generator.id)}, format="json")

        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)


class ChangePriceBookCommandTests(PriceBookFixtureMixin, TestCase):
    def setUp(self):
        self.create_catalog()

    def test_command_applies_change(self):
        self.add_line(self.std_generator)
        out = StringIO()

        call_command(
            "change_price_book", str(self.opportunity.id), str(self.partner.id), stdout=out
        )

        self.assertIn("created 1", out.getvalue())
        self.opportunity.refresh_from_db()
        self.assertEqual(self.opportunity.price_book, self.partner)

    def test_command_reports_abort(self):
        self.add_line(self.std_service)
        out = StringIO()

        call_command(
            "change_price_book",
            str(self.opportunity.id),
            str(self.partner.id),
            "--stop-if-will-lose-line-items",
            stdout=out,
        )

        self.assertIn("Service Plan", out.getvalue())
        self.assertIn("No changes made", out.getvalue())

    def test_command_surfaces_business_errors(self):
        with self.assertRaises(CommandError):
            call_command("change_price_book", str(uuid.uuid4()), str(self.partner.id))


class OpportunityWritePermissionTests(PriceBookFixtureMixin, APITestCase):
    def setUp(self):
        self.create_catalog()
        self.client = APIClient()
        self.rep = User.objects.create_user(username="rep", password="testpass123")
        self.line = self.add_line(self.std_cable, quantity="3")

    def test_any_user_can_read(self):
        self.client.force_authenticate(self.rep)

        resp = self.client.get(reverse("opportunity-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        resp = self.client.get(reverse("opportunity-line-item-list"))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_user_without_change_permission_cannot_write(self):
        self.client.force_authenticate(self.rep)
        opp_url = reverse("opportunity-detail", kwargs={"pk": str(self.opportunity.id)})
        line_url = reverse("opportunity-line-item-detail", kwargs={"pk": str(self.line.id)})

        resp = self.client.patch(opp_url, {"stage": "closed_lost"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.delete(opp_url)
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.patch(line_url, {"quantity": "100"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.post(reverse("opportunity-line-item-list"), {
            "opportunity": str(self.opportunity.id),
            "price_book_entry": str(self.std_generator.id),
            "quantity": "1",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.opportunity.refresh_from_db()
        self.line.refresh_from_db()
        self.assertEqual(self.opportunity.stage, Opportunity.Stage.PROSPECTING)
        self.assertEqual(self.line.quantity, Decimal("3"))
        self.assertEqual(self.opportunity.line_items.count(), 1)

    def test_change_permission_allows_writes(self):
        self.rep.user_permissions.add(Permission.objects.get(codename="change_opportunity"))
        self.client.force_authenticate(self.rep)

        resp = self.client.patch(
            reverse("opportunity-line-item-detail", kwargs={"pk": str(self.line.id)}),
            {"quantity": "5"},
            format="json",
        )

        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.line.refresh_from_db()
        self.assertEqual(self.line.quantity, Decimal("5"))


class OpportunityAdminTests(PriceBookFixtureMixin, TestCase):
    def setUp(self):
        self.create_catalog()
        self.admin_user = User.objects.create_superuser(
            username="admin", email="admin@example.com", password="testpass123"
        )
        self.client.force_login(self.admin_user)
        self.url = reverse("admin:opportunities_opportunity_change", args=[self.opportunity.pk])

    def _post_data(self, rows, initial=0):
        data = {
            "name": self.opportunity.name,
            "account_name": self.opportunity.account_name,
            "stage": self.opportunity.stage,
            "close_date": "",
            "owner": "",
            "line_items-TOTAL_FORMS": str(len(rows)),
            "line_items-INITIAL_FORMS": str(initial),
            "line_items-MIN_NUM_FORMS": "0",
            "line_items-MAX_NUM_FORMS": "1000",
            "_save": "Save",
        }
        for i, row in enumerate(rows):
            for key, value in row.items():
                data[f"line_items-{i}-{key}"] = value
        return data

    def _row(self, entry, line=None, quantity="1", unit_price="10.00", sort_order="0"):
        return {
            "id": str(line.pk) if line else "",
            "opportunity": str(self.opportunity.pk),
            "price_book_entry": str(entry.pk),
            "quantity": quantity,
            "unit_price": unit_price,
            "description": "",
            "sort_order": sort_order,
        }

    def test_existing_line_entry_cannot_be_swapped(self):
        line = self.add_line(self.std_cable)

        resp = self.client.post(
            self.url, self._post_data([self._row(self.std_generator, line=line)], initial=1)
        )

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Cannot be changed on an existing line item.")
        line.refresh_from_db()
        self.assertEqual(line.price_book_entry, self.std_cable)
        self.assertEqual(line.product, self.cable)

    def test_existing_line_can_be_edited(self):
        line = self.add_line(self.std_cable)

        resp = self.client.post(
            self.url, self._post_data([self._row(self.std_cable, line=line, quantity="7")], initial=1)
        )

        self.assertEqual(resp.status_code, 302)
        line.refresh_from_db()
        self.assertEqual(line.quantity, Decimal("7"))

    def test_new_line_from_other_price_book_is_reported(self):
        resp = self.client.post(self.url, self._post_data([self._row(self.partner_cable)]))

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "does not belong to the opportunity")
        self.assertEqual(self.opportunity.line_items.count(), 0)

    def test_new_line_with_inactive_entry_is_reported(self):
        self.std_service.is_active = False
        self.std_service.save()

        resp = self.client.post(self.url, self._post_data([self._row(self.std_service)]))

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "is inactive")
        self.assertEqual(self.opportunity.line_items.count(), 0)

    def test_new_line_is_added_through_service(self):
        resp = self.client.post(
            self.url, self._post_data([self._row(self.std_generator, unit_price="950.00")])
        )

        self.assertEqual(resp.status_code, 302)
        line = self.opportunity.line_items.get()
        self.assertEqual(line.price_book_entry, self.std_generator)
        self.assertEqual(line.product, self.generator)
        self.assertEqual(line.unit_price, Decimal("950.00"))

    def test_opportunity_without_price_book_takes_one_book_only(self):
        self.opportunity.price_book = None
        self.opportunity.save()

        resp = self.client.post(self.url, self._post_data([
            self._row(self.partner_generator, unit_price="900.00"),
            self._row(self.std_cable, sort_order="1"),
        ]))

        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "does not belong to the opportunity")
        self.opportunity.refresh_from_db()
        self.assertIsNone(self.opportunity.price_book)
        self.assertEqual(self.opportunity.line_items.count(), 0)
