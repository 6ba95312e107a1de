from django.contrib import admin

from .models import Buyer, Sale


@admin.register(Buyer)
class BuyerAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ("date", "material", "cooperative", "weight_kg", "price_per_kg", "total_value", "buyer")
    list_filter = ("cooperative", "material")
    search_fields = ("buyer__name", "material__name")
    date_hierarchy = "date"
    autocomplete_fields = ("buyer", "responsible")
    readonly_fields = ("legacy_id", "created_at", "updated_at")

    @admin.display(description="Valor total")
    def total_value(self, obj: Sale):
        return obj.total_value
