from django.conf import settings
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from common.serializers import DateRangeQuerySerializer

from .serializers import RecentActivitiesQuerySerializer, SalaryReportQuerySerializer
from .services import (
    dashboard_stats,
    financial_report,
    recent_activities,
    salary_report,
    upcoming_payments,
    worker_performance,
)


class DashboardStatsAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(dashboard_stats())


class RecentActivitiesAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        query = RecentActivitiesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(recent_activities(query.validated_data["limit"]))


class UpcomingPaymentsAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(upcoming_payments(getattr(settings, "LOW_BALANCE_THRESHOLD", 10000)))


class FinancialReportAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(
            financial_report(query.validated_data.get("start_date"), query.validated_data.get("end_date"))
        )


class WorkerPerformanceReportAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        query = DateRangeQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return Response(
            worker_performance(query.validated_data.get("start_date"), query.validated_data.get("end_date"))
        )


class SalaryReportAPIView(APIView):
    permission_classes = [IsAdminRole]

    def get(self, request):
        query = SalaryReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        data = query.validated_data
        return Response(salary_report(data["start_date"], data["end_date"], data["group_by"]))
