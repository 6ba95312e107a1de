from django.contrib import admin

from .models import MaterialStock


@admin.register(MaterialStock)
class MaterialStockAdmin(admin.ModelAdmin):
    list_display = (
        "material",
        "cooperative",
        "total_collected_kg",
        "total_sold_kg",
        "current_stock_kg",
        "updated_at",
    )
    search_fields = ("material__name", "cooperative__name")
    list_filter = ("cooperative",)
    readonly_fields = ("total_collected_kg", "total_sold_kg", "current_stock_kg", "updated_at")
