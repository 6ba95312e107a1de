from django.contrib import admin

from .models import Material, MaterialGroup


class MaterialInline(admin.TabularInline):
    model = Material
    extra = 0
    fields = ("name", "price_per_kg")


@admin.register(MaterialGroup)
class MaterialGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "materials_count")
    search_fields = ("name",)
    inlines = [MaterialInline]

    @admin.display(description="Materiais")
    def materials_count(self, obj: MaterialGroup) -> int:
        return obj.materials.count()


@admin.register(Material)
class MaterialAdmin(admin.ModelAdmin):
    list_display = ("name", "group", "price_per_kg", "updated_at")
    list_filter = ("group",)
    search_fields = ("name", "group__name")
    readonly_fields = ("legacy_id", "created_at", "updated_at")
