import logging
from dataclasses import dataclass, field

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Max

from apps.catalog.models import PriceBook, PriceBookEntry
from apps.utils.exceptions import BusinessLogicException
from .models import Opportunity, OpportunityLineItem

logger = logging.getLogger(__name__)

MISSING_NAMES_SEPARATOR = ", "


@dataclass
class PriceBookChangeResult:
    will_lose_line_items: bool = False
    missing_product_names: list = field(default_factory=list)
    applied: bool = False
    deleted_count: int = 0
    created_count: int = 0

    @property
    def missing_product_names_display(self) -> str:
        return MISSING_NAMES_SEPARATOR.join(self.missing_product_names)

    def as_output_values(self) -> dict:
        """
        Output shape of the change-price-book invocable action.
        """
        return {
            "willLoseLineItems": self.will_lose_line_items,
            "missingProductNames": self.missing_product_names_display,
        }


def _get_locked_opportunity(opportunity_id) -> Opportunity:
    try:
        return Opportunity.objects.select_for_update().get(id=opportunity_id)
    except (Opportunity.DoesNotExist, ValidationError):
        raise BusinessLogicException(
            f"Opportunity {opportunity_id} does not exist.", code="opportunity_not_found"
        )


def _get_active_price_book(price_book_id) -> PriceBook:
    try:
        price_book = PriceBook.objects.get(id=price_book_id)
    except (PriceBook.DoesNotExist, ValidationError):
        raise BusinessLogicException(
            f"Price book {price_book_id} does not exist.", code="price_book_not_found"
        )
    if not price_book.is_active:
        raise BusinessLogicException(
            f"Price book '{price_book.name}' is inactive.", code="price_book_inactive"
        )
    return price_book


def check_entry_for_price_book(price_book_entry: PriceBookEntry, price_book_id) -> None:
    """
    A line item may only use an active entry of the opportunity's price book.
    `price_book_id` of None means the opportunity has no price book yet.
    """
    if not price_book_entry.is_active:
        raise BusinessLogicException(
            f"Price book entry for {price_book_entry.product.name} is inactive.",
            code="inactive_entry",
        )
    if price_book_id is not None and price_book_id != price_book_entry.price_book_id:
        raise BusinessLogicException(
            "Price book entry does not belong to the opportunity's price book.",
            code="price_book_mismatch",
        )


class PriceBookChangeService:

    @staticmethod
    def change_price_book(
        opportunity_id,
        price_book_id,
        overwrite_unit_price: bool = False,
        stop_if_will_lose_line_items: bool = False,
    ) -> PriceBookChangeResult:
        """
        Repoint an opportunity at another price book and rebuild its line items
        from the matching entries of that price book.

        1. Read the current line items (with products)
        2. Read the active target entries for those products
        3. Build replacements; collect products without a target entry
        4. Stop here without writing if products would be lost and the caller asked to
        5. Delete old items, update the opportunity, insert the replacements
        """
        log_extra = {"opportunity_id": opportunity_id, "price_book_id": price_book_id}
        result = PriceBookChangeResult()

        with transaction.atomic():
            opportunity = _get_locked_opportunity(opportunity_id)
            price_book = _get_active_price_book(price_book_id)

            old_items = list(
                OpportunityLineItem.objects
                .filter(opportunity=opportunity)
                .select_related("product")
            )
            logger.info(
                f"Changing price book of opportunity {opportunity.id} to '{price_book.name}' "
                f"({len(old_items)} line items)",
                extra=log_extra,
            )

            new_items = []
            if old_items:
                product_ids = {item.product_id for item in old_items}
                entries_by_product = {
                    entry.product_id: entry
                    for entry in PriceBookEntry.objects.filter(
                        price_book=price_book,
                        product_id__in=product_ids,
                        is_active=True,
                    )
                }

                missing_product_ids = set()
                for item in old_items:
                    entry = entries_by_product.get(item.product_id)
                    if entry is None:
                        if item.product_id not in missing_product_ids:
                            missing_product_ids.add(item.product_id)
                            result.missing_product_names.append(item.product.name)
                        continue

                    new_items.append(OpportunityLineItem(
                        opportunity=opportunity,
                        price_book_entry=entry,
                        product_id=entry.product_id,
                        quantity=item.quantity,
                        unit_price=entry.unit_price if overwrite_unit_price else item.unit_price,
                        description=item.description,
                        service_date=item.service_date,
                        sort_order=item.sort_order,
                    ))

                result.will_lose_line_items = bool(missing_product_ids)

            if result.will_lose_line_items and stop_if_will_lose_line_items:
                logger.warning(
                    f"Price book change for opportunity {opportunity.id} aborted; "
                    f"products missing from '{price_book.name}': {result.missing_product_names_display}",
                    extra=log_extra,
                )
                return result

            if old_items:
                result.deleted_count, _ = OpportunityLineItem.objects.filter(
                    id__in=[item.id for item in old_items]
                ).delete()

            opportunity.price_book = price_book
            opportunity.save(update_fields=["price_book", "updated_at"])

            if new_items:
                OpportunityLineItem.objects.bulk_create(new_items)
            result.created_count = len(new_items)
            result.applied = True

        if result.will_lose_line_items:
            logger.warning(
                f"Opportunity {opportunity_id} lost line items for: {result.missing_product_names_display}",
                extra=log_extra,
            )
        logger.info(
            f"Price book changed for opportunity {opportunity_id}: "
            f"deleted={result.deleted_count} created={result.created_count}",
            extra=log_extra,
        )
        return result


class LineItemService:

    @staticmethod
    @transaction.atomic
    def add_line_item(
        opportunity: Opportunity,
        price_book_entry: PriceBookEntry,
        quantity,
        unit_price=None,
        description: str = "",
        service_date=None,
        sort_order=None,
    ) -> OpportunityLineItem:
        """
        Adds one priced line to an opportunity.
        An opportunity without a price book adopts the entry's price book.
        """
        locked = Opportunity.objects.select_for_update().get(pk=opportunity.pk)

        check_entry_for_price_book(price_book_entry, locked.price_book_id)

        if locked.price_book_id is None:
            locked.price_book_id = price_book_entry.price_book_id
            locked.save(update_fields=["price_book", "updated_at"])
            opportunity.price_book_id = locked.price_book_id
            logger.info(
                f"Opportunity {locked.id} adopted price book {locked.price_book_id}",
                extra={"opportunity_id": locked.id, "price_book_id": locked.price_book_id},
            )
        if sort_order is None:
            current_max = locked.line_items.aggregate(m=Max("sort_order"))["m"]
            sort_order = 0 if current_max is None else current_max + 1

        return OpportunityLineItem.objects.create(
            opportunity=locked,
            price_book_entry=price_book_entry,
            product_id=price_book_entry.product_id,
            quantity=quantity,
            unit_price=price_book_entry.unit_price if unit_price is None else unit_price,
            description=description,
            service_date=service_date,
            sort_order=sort_order,
        )
