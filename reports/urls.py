from django.urls import path

from .views import EarningsComparisonView, PriceFluctuationView, WorkerCollectionsView, WorkerProductivityView

app_name = "reports"

urlpatterns = [
    path("worker-productivity/", WorkerProductivityView.as_view(), name="worker-productivity"),
    path("worker-collections/", WorkerCollectionsView.as_view(), name="worker-collections"),
    path("price-fluctuation/", PriceFluctuationView.as_view(), name="price-fluctuation"),
    path("earnings-comparison/", EarningsComparisonView.as_view(), name="earnings-comparison"),
]
