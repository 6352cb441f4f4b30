from copy import copy

from django.db import transaction
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly
from apps.ledger.services import LedgerService
from common.serializers import RecordFilterQuerySerializer, apply_date_range

from .audit import SalaryAuditService
from .models import Salary
from .policies import SalaryPolicy
from .serializers import SalarySerializer


def _salary_not_found():
    return Response({"detail": "Salary not found."}, status=status.HTTP_404_NOT_FOUND)


class SalaryListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = RecordFilterQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        qs = SalaryPolicy.visible_salaries(request.user)
        if filters.get("project_id"):
            qs = qs.filter(project_id=filters["project_id"])
        if filters.get("worker_id"):
            qs = qs.filter(worker_id=filters["worker_id"])
        qs = apply_date_range(qs, filters)
        return Response(SalarySerializer(qs, many=True).data)

    def post(self, request):
        serializer = SalarySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            salary = serializer.save()
            LedgerService.post_salary_create(salary)
        SalaryAuditService.log_created(request, salary)
        return Response(SalarySerializer(salary).data, status=status.HTTP_201_CREATED)


class SalaryDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, salary_id: int):
        salary = SalaryPolicy.visible_salaries(request.user).filter(id=salary_id).first()
        if not salary:
            return _salary_not_found()
        return Response(SalarySerializer(salary).data)

    def put(self, request, salary_id: int):
        return self._update(request, salary_id, partial=False)

    def patch(self, request, salary_id: int):
        return self._update(request, salary_id, partial=True)

    def _update(self, request, salary_id: int, *, partial: bool):
        with transaction.atomic():
            salary = Salary.objects.select_for_update().filter(id=salary_id).first()
            if not salary:
                return _salary_not_found()
            serializer = SalarySerializer(salary, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            previous = copy(salary)
            salary = serializer.save()
            LedgerService.post_salary_update(previous, salary)
        SalaryAuditService.log_updated(request, salary, sorted(serializer.validated_data))
        return Response(SalarySerializer(salary).data)

    def delete(self, request, salary_id: int):
        with transaction.atomic():
            salary = Salary.objects.select_for_update().filter(id=salary_id).first()
            if not salary:
                return _salary_not_found()
            SalaryAuditService.log_deleted(request, salary)
            salary.delete()
            LedgerService.post_salary_delete(salary)
        return Response({"message": "Salary removed"}, status=status.HTTP_200_OK)
