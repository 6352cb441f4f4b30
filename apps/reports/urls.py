from django.urls import path

from .views import (
    DashboardStatsAPIView,
    FinancialReportAPIView,
    RecentActivitiesAPIView,
    SalaryReportAPIView,
    UpcomingPaymentsAPIView,
    WorkerPerformanceReportAPIView,
)


urlpatterns = [
    path("dashboard/", DashboardStatsAPIView.as_view(), name="reports-dashboard"),
    path("recent-activities/", RecentActivitiesAPIView.as_view(), name="reports-recent-activities"),
    path("upcoming-payments/", UpcomingPaymentsAPIView.as_view(), name="reports-upcoming-payments"),
    path("financial/", FinancialReportAPIView.as_view(), name="reports-financial"),
    path("worker-performance/", WorkerPerformanceReportAPIView.as_view(), name="reports-worker-performance"),
    path("salaries/", SalaryReportAPIView.as_view(), name="reports-salaries"),
]
