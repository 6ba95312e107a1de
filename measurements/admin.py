from django.contrib import admin

from .models import Measurement, WorkerContribution


@admin.register(Measurement)
class MeasurementAdmin(admin.ModelAdmin):
    list_display = ("timestamp", "wastepicker", "material", "weight_kg", "bag_filled", "cooperative")
    list_filter = ("material", "cooperative", "bag_filled")
    search_fields = ("wastepicker__full_name", "wastepicker__wastepicker_code", "material__name")
    autocomplete_fields = ("wastepicker",)
    date_hierarchy = "timestamp"
    readonly_fields = ("legacy_id",)


@admin.register(WorkerContribution)
class WorkerContributionAdmin(admin.ModelAdmin):
    list_display = ("wastepicker", "material", "iso_year", "iso_week", "weight_kg", "earnings", "last_updated")
    list_filter = ("iso_year", "material")
    search_fields = ("wastepicker__full_name", "material__name")
    readonly_fields = ("daily_breakdown", "last_updated")
