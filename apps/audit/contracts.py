from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class AuditEvent:
    action: str
    actor: Any = None
    object_type: str = ""
    object_id: str = ""
    level: str = "info"
    category: str = "system"
    ip_address: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def log_fields(self) -> dict[str, Any]:
        """Keyword arguments for AuditLog.log; anonymous actors are stored as no user."""
        actor = self.actor
        if actor is not None and not getattr(actor, "is_authenticated", False):
            actor = None
        return {
            "action": self.action,
            "user": actor,
            "object_type": self.object_type,
            "object_id": self.object_id,
            "level": self.level,
            "category": self.category,
            "ip_address": self.ip_address,
            "metadata": self.metadata or {},
        }
