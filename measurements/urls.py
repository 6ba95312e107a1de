from django.urls import path

from .views import MeasurementCollectionView, RecalculateContributionsView

app_name = "measurements"

urlpatterns = [
    path("measurements/", MeasurementCollectionView.as_view(), name="collection"),
    path("recalculate-contributions/", RecalculateContributionsView.as_view(), name="recalculate"),
]
