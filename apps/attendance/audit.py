from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class AttendanceAuditService:
    @staticmethod
    def _log(request, action: str, object_id: str, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type="attendance",
            object_id=object_id,
            level=level,
            category="ledger",
            ip_address=client_ip(request),
            metadata={"actor_id": request.user.id, **metadata},
        )

    @classmethod
    def log_created(cls, request, attendance) -> None:
        cls._log(
            request,
            AuditEvents.ATTENDANCE_CREATED,
            str(attendance.id),
            worker_id=attendance.worker_id,
            date=attendance.date.isoformat(),
            status=attendance.status,
            earned_amount=str(attendance.earned_amount),
        )

    @classmethod
    def log_updated(cls, request, attendance, changed_fields: list[str]) -> None:
        cls._log(
            request,
            AuditEvents.ATTENDANCE_UPDATED,
            str(attendance.id),
            worker_id=attendance.worker_id,
            date=attendance.date.isoformat(),
            changed_fields=changed_fields,
        )

    @classmethod
    def log_deleted(cls, request, attendance) -> None:
        cls._log(
            request,
            AuditEvents.ATTENDANCE_DELETED,
            str(attendance.id),
            level="warning",
            worker_id=attendance.worker_id,
            date=attendance.date.isoformat(),
        )

    @classmethod
    def log_duplicate_rejected(cls, request, worker_id, date) -> None:
        cls._log(
            request,
            AuditEvents.ATTENDANCE_DUPLICATE_REJECTED,
            "",
            level="warning",
            worker_id=worker_id,
            date=date.isoformat(),
        )
