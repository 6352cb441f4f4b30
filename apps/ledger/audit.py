from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class LedgerAuditService:
    @classmethod
    def log_reconciled(cls, request, drifts: list, applied: bool) -> None:
        log_event(
            action=AuditEvents.LEDGER_RECONCILED,
            actor=request.user,
            object_type="ledger",
            object_id="",
            level="warning" if drifts else "info",
            category="ledger",
            ip_address=client_ip(request),
            metadata={
                "actor_id": request.user.id,
                "applied": applied,
                "drift_count": len(drifts),
                "drifts": [drift.as_dict() for drift in drifts[:50]],
            },
        )
