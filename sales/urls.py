from django.urls import path

from .views import BuyerCollectionView, SaleCollectionView, SaleDetailView

app_name = "sales"

urlpatterns = [
    path("", SaleCollectionView.as_view(), name="collection"),
    path("buyers/", BuyerCollectionView.as_view(), name="buyers"),
    path("<int:pk>/", SaleDetailView.as_view(), name="detail"),
]
