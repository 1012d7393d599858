"""
AuditLogger - audit trail for account and tenant management.

Every management action (companies and user accounts created, reassigned
or deleted) is written to:
1. Structured logs (stdout) - real-time monitoring
2. The audit_logs table - queryable history

Usage:
    from wsp.infrastructure.audit import audit_logger

    await audit_logger.log(
        client,
        user_id=actor.id,
        action="company_created",
        resource_type="company",
        resource_id=company.id,
        request_id=request.state.request_id,
    )

Audit failures are logged and swallowed; they never fail the request.
"""

from typing import Any

from wsp.db.client import DataClient
from wsp.db.helpers import DatabaseError
from wsp.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class AuditLogger:
    @staticmethod
    async def log(
        client: DataClient,
        user_id: str,
        action: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        request_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> bool:
        """
        Record an audit event.

        Returns:
            True if persisted, False if only the log line was written
        """
        logger.info(
            "Audit event",
            audit_action=action,
            user_id=user_id,
            resource_type=resource_type,
            resource_id=resource_id,
            request_id=request_id,
        )

        row = {
            "user_id": user_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "request_id": request_id,
            "metadata": metadata or {},
        }
        try:
            await client.table("audit_logs").insert(row).execute()
            return True
        except DatabaseError as e:
            logger.error("Failed to persist audit event", audit_action=action, user_id=user_id, error=str(e))
            return False


audit_logger = AuditLogger()
