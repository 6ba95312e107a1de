from django.contrib import admin
from django.urls import include, path

from .views import CsrfTokenView, check_data_view

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/csrf/", CsrfTokenView.as_view(), name="csrf-token"),
    path("api/debug/check-data/", check_data_view, name="check-data"),
    path("api/cooperatives/", include("cooperatives.urls")),
    path("api/materials/", include("materials.urls")),
    path("api/stock/", include("inventory.urls")),
    path("api/sales/", include("sales.urls")),
    path("api/", include("measurements.urls")),
    path("api/", include("reports.urls")),
    path("api/", include("users.urls")),
]
