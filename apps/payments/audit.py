from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class PaymentAuditService:
    @staticmethod
    def _log(request, action: str, payment, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type="payment",
            object_id=str(payment.id),
            level=level,
            category="ledger",
            ip_address=client_ip(request),
            metadata={
                "actor_id": request.user.id,
                "project_id": payment.project_id,
                "project_owner_id": payment.project_owner_id,
                "amount": str(payment.amount),
                **metadata,
            },
        )

    @classmethod
    def log_created(cls, request, payment) -> None:
        cls._log(request, AuditEvents.PAYMENT_CREATED, payment)

    @classmethod
    def log_updated(cls, request, payment, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.PAYMENT_UPDATED, payment, changed_fields=changed_fields)

    @classmethod
    def log_deleted(cls, request, payment) -> None:
        cls._log(request, AuditEvents.PAYMENT_DELETED, payment, level="warning")
