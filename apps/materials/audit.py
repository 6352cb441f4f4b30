from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class MaterialAuditService:
    @staticmethod
    def _log(request, action: str, material, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type="material",
            object_id=str(material.id),
            level=level,
            category="ledger",
            ip_address=client_ip(request),
            metadata={
                "actor_id": request.user.id,
                "project_id": material.project_id,
                "total_cost": str(material.total_cost),
                **metadata,
            },
        )

    @classmethod
    def log_created(cls, request, material) -> None:
        cls._log(request, AuditEvents.MATERIAL_CREATED, material)

    @classmethod
    def log_updated(cls, request, material, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.MATERIAL_UPDATED, material, changed_fields=changed_fields)

    @classmethod
    def log_deleted(cls, request, material) -> None:
        cls._log(request, AuditEvents.MATERIAL_DELETED, material, level="warning")
