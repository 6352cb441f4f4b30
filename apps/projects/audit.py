from __future__ import annotations

from apps.audit import AuditEvents, client_ip, log_event


class ProjectAuditService:
    @staticmethod
    def _log(request, action: str, object_type: str, obj, *, level: str = "info", **metadata) -> None:
        log_event(
            action=action,
            actor=request.user,
            object_type=object_type,
            object_id=str(obj.id),
            level=level,
            category="ledger" if object_type == "project" else "user",
            ip_address=client_ip(request),
            metadata={"actor_id": request.user.id, "name": obj.name, **metadata},
        )

    @classmethod
    def log_owner_created(cls, request, owner) -> None:
        cls._log(request, AuditEvents.PROJECT_OWNER_CREATED, "project_owner", owner)

    @classmethod
    def log_owner_updated(cls, request, owner, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.PROJECT_OWNER_UPDATED, "project_owner", owner, changed_fields=changed_fields)

    @classmethod
    def log_owner_deleted(cls, request, owner) -> None:
        cls._log(request, AuditEvents.PROJECT_OWNER_DELETED, "project_owner", owner, level="warning")

    @classmethod
    def log_owner_delete_blocked(cls, request, owner, reason: str) -> None:
        cls._log(
            request,
            AuditEvents.PROJECT_OWNER_DELETE_BLOCKED,
            "project_owner",
            owner,
            level="warning",
            reason=reason,
        )

    @classmethod
    def log_project_created(cls, request, project) -> None:
        cls._log(
            request,
            AuditEvents.PROJECT_CREATED,
            "project",
            project,
            owner_id=project.owner_id,
            total_amount=str(project.total_amount),
        )

    @classmethod
    def log_project_updated(cls, request, project, changed_fields: list[str]) -> None:
        cls._log(request, AuditEvents.PROJECT_UPDATED, "project", project, changed_fields=changed_fields)

    @classmethod
    def log_project_deleted(cls, request, project) -> None:
        cls._log(request, AuditEvents.PROJECT_DELETED, "project", project, level="warning")

    @classmethod
    def log_project_delete_blocked(cls, request, project, reason: str) -> None:
        cls._log(request, AuditEvents.PROJECT_DELETE_BLOCKED, "project", project, level="warning", reason=reason)

    @classmethod
    def log_workers_assigned(cls, request, project, worker_ids: list[int]) -> None:
        cls._log(request, AuditEvents.PROJECT_WORKERS_ASSIGNED, "project", project, worker_ids=worker_ids)
