# apps/opportunities/admin.py
from django.contrib import admin
from django.forms.models import BaseInlineFormSet
from .models import Opportunity, OpportunityLineItem
from .services import LineItemService, check_entry_for_price_book
from apps.utils.exceptions import BusinessLogicException


class OpportunityLineItemFormSet(BaseInlineFormSet):
    """
    Existing lines keep their entry. New lines must use an active entry of the
    opportunity's price book, or all share one book when the opportunity has none yet.
    """

    def clean(self):
        super().clean()
        price_book_id = self.instance.price_book_id

        for form in self.forms:
            if not hasattr(form, "cleaned_data") or self._should_delete_form(form):
                continue

            if not form.instance._state.adding:
                if "price_book_entry" in form.changed_data:
                    form.add_error("price_book_entry", "Cannot be changed on an existing line item.")
                continue

            entry = form.cleaned_data.get("price_book_entry")
            if entry is None or not form.has_changed():
                continue
            try:
                check_entry_for_price_book(entry, price_book_id)
            except BusinessLogicException as e:
                form.add_error("price_book_entry", e.message)
                continue
            if price_book_id is None:
                price_book_id = entry.price_book_id


class OpportunityLineItemInline(admin.TabularInline):
    model = OpportunityLineItem
    formset = OpportunityLineItemFormSet
    extra = 0
    fields = ("price_book_entry", "product", "quantity", "unit_price", "description", "sort_order")
    readonly_fields = ("product",)
    autocomplete_fields = ("price_book_entry",)


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = ("name", "account_name", "stage", "close_date", "price_book")
    list_filter = ("stage", "price_book")
    search_fields = ("name", "account_name")
    # Changing the price book must go through PriceBookChangeService
    readonly_fields = ("price_book",)
    inlines = [OpportunityLineItemInline]

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for obj in formset.deleted_objects:
            obj.delete()

        for obj in instances:
            if not obj._state.adding:
                obj.save()
                continue
            # Validated in OpportunityLineItemFormSet.clean; the service also syncs product
            LineItemService.add_line_item(
                opportunity=form.instance,
                price_book_entry=obj.price_book_entry,
                quantity=obj.quantity,
                unit_price=obj.unit_price,
                description=obj.description,
                sort_order=obj.sort_order,
            )


@admin.register(OpportunityLineItem)
class OpportunityLineItemAdmin(admin.ModelAdmin):
    list_display = ("opportunity", "product", "quantity", "unit_price", "sort_order")
    search_fields = ("opportunity__name", "product__name")
    readonly_fields = ("opportunity", "price_book_entry", "product")

    def has_add_permission(self, request):
        return False # Lines are added from the opportunity page
