from __future__ import annotations

from typing import Protocol

from .contracts import AuditEvent


class AuditBackend(Protocol):
    def write(self, event: AuditEvent) -> None:
        ...


class AccountsAuditBackend:
    """Writes to the accounts.AuditLog table."""

    def write(self, event: AuditEvent) -> None:
        from accounts.models import AuditLog

        AuditLog.log(**event.log_fields())


class NoopAuditBackend:
    def write(self, event: AuditEvent) -> None:  # pragma: no cover
        return None
