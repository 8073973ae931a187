# apps/catalog/admin.py
from django.contrib import admin
from django.forms.models import BaseInlineFormSet
from .models import Product, PriceBook, PriceBookEntry


class PriceBookEntryFormSet(BaseInlineFormSet):
    def clean(self):
        super().clean()
        for form in self.forms:
            if not hasattr(form, "cleaned_data") or form.instance._state.adding:
                continue
            if "product" in form.changed_data:
                form.add_error("product", "Cannot be changed on an existing price book entry.")


class PriceBookEntryInline(admin.TabularInline):
    model = PriceBookEntry
    formset = PriceBookEntryFormSet
    extra = 0
    autocomplete_fields = ("product",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("product_code", "name", "family", "is_active")
    list_filter = ("is_active", "family")
    search_fields = ("name", "product_code")


@admin.register(PriceBook)
class PriceBookAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "is_standard")
    list_filter = ("is_active", "is_standard")
    search_fields = ("name",)
    inlines = [PriceBookEntryInline]


@admin.register(PriceBookEntry)
class PriceBookEntryAdmin(admin.ModelAdmin):
    list_display = ("price_book", "product", "unit_price", "is_active")
    list_filter = ("price_book", "is_active")
    search_fields = ("product__name", "product__product_code")

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("price_book", "product")
        return ()
