"""Audit logging package."""

from wisevault.audit.logger import AuditLogger, create_correlation_id, get_logger

__all__ = ["AuditLogger", "create_correlation_id", "get_logger"]
