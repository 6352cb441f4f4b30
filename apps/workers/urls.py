from django.urls import path

from .views import (
    WorkerAttendanceAPIView,
    WorkerDetailAPIView,
    WorkerListCreateAPIView,
    WorkerSalariesAPIView,
)


urlpatterns = [
    path("", WorkerListCreateAPIView.as_view(), name="worker-list"),
    path("<int:worker_id>/", WorkerDetailAPIView.as_view(), name="worker-detail"),
    path("<int:worker_id>/attendance/", WorkerAttendanceAPIView.as_view(), name="worker-attendance"),
    path("<int:worker_id>/salaries/", WorkerSalariesAPIView.as_view(), name="worker-salaries"),
]
