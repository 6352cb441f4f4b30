from django.urls import path

from .views import AttendanceDetailAPIView, AttendanceListCreateAPIView, AttendanceReportAPIView


urlpatterns = [
    path("", AttendanceListCreateAPIView.as_view(), name="attendance-list"),
    path("report/", AttendanceReportAPIView.as_view(), name="attendance-report"),
    path("<int:attendance_id>/", AttendanceDetailAPIView.as_view(), name="attendance-detail"),
]
