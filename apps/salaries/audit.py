from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class SalaryAuditService:
    @staticmethod
    def _log(request, action: str, salary, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type="salary",
            object_id=str(salary.id),
            level=level,
            category="ledger",
            ip_address=client_ip(request),
            metadata={
                "actor_id": request.user.id,
                "worker_id": salary.worker_id,
                "amount": str(salary.amount),
                "posted_amount": str(salary.posted_amount),
                **metadata,
            },
        )

    @classmethod
    def log_created(cls, request, salary) -> None:
        cls._log(request, AuditEvents.SALARY_CREATED, salary)

    @classmethod
    def log_updated(cls, request, salary, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.SALARY_UPDATED, salary, changed_fields=changed_fields)

    @classmethod
    def log_deleted(cls, request, salary) -> None:
        cls._log(request, AuditEvents.SALARY_DELETED, salary, level="warning")
