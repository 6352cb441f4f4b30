from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class WorkerAuditService:
    @staticmethod
    def _log(request, action: str, worker, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type="worker",
            object_id=str(worker.id),
            level=level,
            category="user",
            ip_address=client_ip(request),
            metadata={"actor_id": request.user.id, "name": worker.name, **metadata},
        )

    @classmethod
    def log_created(cls, request, worker) -> None:
        cls._log(request, AuditEvents.WORKER_CREATED, worker, daily_salary=str(worker.daily_salary))

    @classmethod
    def log_updated(cls, request, worker, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.WORKER_UPDATED, worker, changed_fields=changed_fields)

    @classmethod
    def log_deleted(cls, request, worker) -> None:
        cls._log(request, AuditEvents.WORKER_DELETED, worker, level="warning")

    @classmethod
    def log_delete_blocked(cls, request, worker, reason: str) -> None:
        cls._log(request, AuditEvents.WORKER_DELETE_BLOCKED, worker, level="warning", reason=reason)
