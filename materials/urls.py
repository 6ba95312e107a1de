from django.urls import path

from .views import MaterialCollectionView, MaterialDetailView

app_name = "materials"

urlpatterns = [
    path("", MaterialCollectionView.as_view(), name="collection"),
    path("<int:pk>/", MaterialDetailView.as_view(), name="detail"),
]
