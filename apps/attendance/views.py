from copy import copy

from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrReadOnly
from apps.ledger.services import LedgerService
from common.serializers import RecordFilterQuerySerializer, apply_date_range

from .audit import AttendanceAuditService
from .models import Attendance
from .policies import AttendancePolicy
from .serializers import AttendanceReportQuerySerializer, AttendanceSerializer
from .services import attendance_report


DUPLICATE_DETAIL = "Attendance already recorded for this date."


def _attendance_not_found():
    return Response({"detail": "Attendance not found."}, status=status.HTTP_404_NOT_FOUND)


def _duplicate(request, worker_id, date):
    AttendanceAuditService.log_duplicate_rejected(request, worker_id, date)
    return Response({"detail": DUPLICATE_DETAIL}, status=status.HTTP_400_BAD_REQUEST)


class AttendanceListCreateAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request):
        query = RecordFilterQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        qs = AttendancePolicy.visible_attendance(request.user)
        if filters.get("project_id"):
            qs = qs.filter(project_id=filters["project_id"])
        if filters.get("worker_id"):
            qs = qs.filter(worker_id=filters["worker_id"])
        qs = apply_date_range(qs, filters)
        return Response(AttendanceSerializer(qs, many=True).data)

    def post(self, request):
        serializer = AttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        worker = serializer.validated_data["worker"]
        day = serializer.validated_data["date"]
        if AttendancePolicy.is_duplicate(worker.id, day):
            return _duplicate(request, worker.id, day)

        try:
            with transaction.atomic():
                attendance = serializer.save()
                LedgerService.post_attendance_create(attendance)
        except IntegrityError:
            # Lost the race against a concurrent insert for the same day.
            return _duplicate(request, worker.id, day)

        AttendanceAuditService.log_created(request, attendance)
        return Response(AttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)


class AttendanceDetailAPIView(APIView):
    permission_classes = [IsAdminOrReadOnly]

    def get(self, request, attendance_id: int):
        attendance = AttendancePolicy.visible_attendance(request.user).filter(id=attendance_id).first()
        if not attendance:
            return _attendance_not_found()
        return Response(AttendanceSerializer(attendance).data)

    def put(self, request, attendance_id: int):
        return self._update(request, attendance_id, partial=False)

    def patch(self, request, attendance_id: int):
        return self._update(request, attendance_id, partial=True)

    def _update(self, request, attendance_id: int, *, partial: bool):
        try:
            with transaction.atomic():
                attendance = Attendance.objects.select_for_update().filter(id=attendance_id).first()
                if not attendance:
                    return _attendance_not_found()
                serializer = AttendanceSerializer(attendance, data=request.data, partial=partial)
                serializer.is_valid(raise_exception=True)
                worker = serializer.validated_data.get("worker", attendance.worker)
                day = serializer.validated_data.get("date", attendance.date)
                if AttendancePolicy.is_duplicate(worker.id, day, exclude_id=attendance.id):
                    return _duplicate(request, worker.id, day)
                previous = copy(attendance)
                attendance = serializer.save()
                LedgerService.post_attendance_update(previous, attendance)
        except IntegrityError:
            return _duplicate(request, worker.id, day)

        AttendanceAuditService.log_updated(request, attendance, sorted(serializer.validated_data))
        return Response(AttendanceSerializer(attendance).data)

    def delete(self, request, attendance_id: int):
        with transaction.atomic():
            attendance = Attendance.objects.select_for_update().filter(id=attendance_id).first()
            if not attendance:
                return _attendance_not_found()
            AttendanceAuditService.log_deleted(request, attendance)
            attendance.delete()
            LedgerService.post_attendance_delete(attendance)
        return Response({"message": "Attendance removed"}, status=status.HTTP_200_OK)


class AttendanceReportAPIView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        query = AttendanceReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        filters = query.validated_data

        qs = apply_date_range(AttendancePolicy.visible_attendance(request.user), filters)
        if filters.get("project_id"):
            qs = qs.filter(project_id=filters["project_id"])
        if filters.get("worker_id"):
            qs = qs.filter(worker_id=filters["worker_id"])
        return Response(
            {
                "start_date": filters["start_date"],
                "end_date": filters["end_date"],
                "group_by": filters["group_by"],
                "rows": attendance_report(qs, filters["group_by"]),
            }
        )
