from django.core.management.base import BaseCommand, CommandError

from apps.opportunities.services import PriceBookChangeService
from apps.utils.exceptions import BusinessLogicException


class Command(BaseCommand):
    help = "Moves an opportunity to another price book, migrating its line items"

    def add_arguments(self, parser):
        parser.add_argument("opportunity_id")
        parser.add_argument("price_book_id")
        parser.add_argument(
            "--overwrite-unit-price",
            action="store_true",
            help="Take unit prices from the new price book",
        )
        parser.add_argument(
            "--stop-if-will-lose-line-items",
            action="store_true",
            help="Make no changes if any product is missing from the new price book",
        )

    def handle(self, *args, **options):
        try:
            result = PriceBookChangeService.change_price_book(
                opportunity_id=options["opportunity_id"],
                price_book_id=options["price_book_id"],
                overwrite_unit_price=options["overwrite_unit_price"],
                stop_if_will_lose_line_items=options["stop_if_will_lose_line_items"],
            )
        except BusinessLogicException as e:
            raise CommandError(e.message)

        if result.will_lose_line_items:
            self.stdout.write(
                self.style.WARNING(f"Missing products: {result.missing_product_names_display}")
            )

        if not result.applied:
            self.stdout.write(self.style.WARNING("No changes made."))
            return

        self.stdout.write(self.style.SUCCESS(
            f"Price book changed. Removed {result.deleted_count} line items, "
            f"created {result.created_count}."
        ))
