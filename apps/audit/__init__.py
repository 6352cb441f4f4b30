"""Unified audit facade package."""

from .events import AuditEvents
from .services import client_ip, log_event

__all__ = ["log_event", "client_ip", "AuditEvents"]
