"""Audit logging package."""

from prism_bills.audit.logger import AuditLogger, get_audit_logger

__all__ = ["AuditLogger", "get_audit_logger"]
