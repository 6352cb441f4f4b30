from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings

from .backends import AccountsAuditBackend, AuditBackend, NoopAuditBackend
from .contracts import AuditEvent

logger = logging.getLogger(__name__)


class AuditService:
    """
    Unified entrypoint for audit logging.

    The backend is picked by settings.AUDIT_BACKEND:
    - accounts (default): write to accounts.AuditLog
    - noop: drop events
    """

    def __init__(self) -> None:
        self.backend = self._build_backend(getattr(settings, "AUDIT_BACKEND", "accounts"))

    def _build_backend(self, name: str) -> AuditBackend:
        if name == "accounts":
            return AccountsAuditBackend()
        return NoopAuditBackend()

    def log(self, event: AuditEvent) -> None:
        try:
            self.backend.write(event)
        except Exception:
            # Audit should not break main request flow.
            logger.exception("Audit write failed for action=%s", event.action)


def client_ip(request) -> Optional[str]:
    if request is None:
        return None
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return xff.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_event(
    *,
    action: str,
    actor=None,
    object_type: str = "",
    object_id: str = "",
    level: str = "info",
    category: str = "system",
    ip_address: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> None:
    event = AuditEvent(
        action=action,
        actor=actor,
        object_type=object_type,
        object_id=object_id,
        level=level,
        category=category,
        ip_address=ip_address,
        metadata=metadata or {},
    )
    AuditService().log(event)
