from django.urls import path

from .views import CooperativeCollectionView

app_name = "cooperatives"

urlpatterns = [
    path("", CooperativeCollectionView.as_view(), name="collection"),
]
