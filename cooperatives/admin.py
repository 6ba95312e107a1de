from django.contrib import admin

from .models import Cooperative, Device


class DeviceInline(admin.TabularInline):
    model = Device
    extra = 0


@admin.register(Cooperative)
class CooperativeAdmin(admin.ModelAdmin):
    list_display = ("name", "contact", "address", "created_at")
    search_fields = ("name", "contact")
    inlines = (DeviceInline,)


@admin.register(Device)
class DeviceAdmin(admin.ModelAdmin):
    list_display = ("__str__", "cooperative", "is_active")
    list_filter = ("is_active", "cooperative")
