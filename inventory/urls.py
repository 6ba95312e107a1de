from django.urls import path

from .views import StockView

app_name = "inventory"

urlpatterns = [
    path("", StockView.as_view(), name="stock"),
]
