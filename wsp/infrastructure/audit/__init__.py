"""
Audit logging for tenant and account management.
"""

from wsp.infrastructure.audit.audit_logger import AuditLogger, audit_logger

__all__ = ["AuditLogger", "audit_logger"]
