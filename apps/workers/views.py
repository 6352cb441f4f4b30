from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.access_policy import AccessPolicy
from accounts.permissions import IsAdminOrReadOnly
from apps.attendance.serializers import AttendanceSerializer
from apps.salaries.serializers import SalarySerializer

from .audit import WorkerAuditService
from .models import Worker
from .policies import WorkerPolicy
from .serializers import WorkerListQuerySerializer, WorkerSerializer


def _worker_not_found():
    return Response({"detail": "Worker not found."}, status=status.HTTP_404_NOT_FOUND)


class WorkerListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = WorkerListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        search = (query.validated_data.get("search") or "").strip()
        is_active = query.validated_data.get("is_active")

        qs = WorkerPolicy.visible_workers(request.user)
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(phone__icontains=search) | Q(role__icontains=search))
        if is_active is not None:
            qs = qs.filter(is_active=is_active)
        return Response(WorkerSerializer(qs, many=True).data)

    def post(self, request):
        serializer = WorkerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        worker = serializer.save()
        WorkerAuditService.log_created(request, worker)
        return Response(WorkerSerializer(worker).data, status=status.HTTP_201_CREATED)


class WorkerDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, worker_id: int):
        worker = Worker.objects.filter(id=worker_id).first()
        if not worker or not AccessPolicy.can_view_worker(request.user, worker):
            return _worker_not_found()
        return Response(WorkerSerializer(worker).data)

    def put(self, request, worker_id: int):
        return self._update(request, worker_id, partial=False)

    def patch(self, request, worker_id: int):
        return self._update(request, worker_id, partial=True)

    def _update(self, request, worker_id: int, *, partial: bool):
        with transaction.atomic():
            # Locked so the save does not overwrite a concurrent ledger posting.
            worker = Worker.objects.select_for_update().filter(id=worker_id).first()
            if not worker:
                return _worker_not_found()
            serializer = WorkerSerializer(worker, data=request.data, partial=partial)
            serializer.is_valid(raise_exception=True)
            worker = serializer.save()
        WorkerAuditService.log_updated(request, worker, sorted(serializer.validated_data))
        return Response(WorkerSerializer(worker).data)

    def delete(self, request, worker_id: int):
        worker = Worker.objects.filter(id=worker_id).first()
        if not worker:
            return _worker_not_found()
        reason = WorkerPolicy.delete_blocker(worker)
        if reason:
            WorkerAuditService.log_delete_blocked(request, worker, reason)
            return Response({"detail": reason}, status=status.HTTP_400_BAD_REQUEST)
        WorkerAuditService.log_deleted(request, worker)
        worker.delete()
        return Response({"message": "Worker removed"}, status=status.HTTP_200_OK)


class WorkerAttendanceAPIView(APIView):
    def get(self, request, worker_id: int):
        worker = Worker.objects.filter(id=worker_id).first()
        if not worker or not AccessPolicy.can_view_worker(request.user, worker):
            return _worker_not_found()
        qs = worker.attendance.select_related("worker", "project")
        return Response(AttendanceSerializer(qs, many=True).data)


class WorkerSalariesAPIView(APIView):
    def get(self, request, worker_id: int):
        worker = Worker.objects.filter(id=worker_id).first()
        if not worker or not AccessPolicy.can_view_worker(request.user, worker):
            return _worker_not_found()
        qs = worker.salaries.select_related("worker", "project")
        return Response(SalarySerializer(qs, many=True).data)
