"""
Audit logging for authentication and stock-affecting operations.

Every create/update/delete of a voucher, process, output or sale is logged
with who made it and what changed, so stock drift can be traced back to the
mutation that caused it.

LOGGING SENSITIVE DATA: auth-related logs never include passwords or tokens.
"""
import logging
import json
from datetime import datetime
from typing import Any, Optional, Dict

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _default(value: Any) -> str:
    # Decimal and date values in change sets
    return str(value)


class AuditLog:
    """Central audit logging for account and transaction events."""

    @staticmethod
    def log_authentication(
        action: str,  # "login", "logout", "register", "failed_login"
        username: str,
        ip_address: str,
        success: bool,
        reason: str = "",
    ):
        """
        Log authentication events.

        Usage:
            AuditLog.log_authentication("login", "admin", "192.168.1.1", True)
            AuditLog.log_authentication("failed_login", "admin", "192.168.1.1", False, reason="Invalid password")
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": f"auth.{action}",
            "username": username,
            "ip_address": ip_address,
            "success": success,
        }

        if reason and not success:
            log_entry["reason"] = reason

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "clear"
        resource_type: str,  # "voucher", "process", "output", "sale", "account"
        resource_id: Optional[int],
        username: str,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log a transaction mutation after it has been committed.

        Usage:
            AuditLog.log_action("create", "sale", 12, "admin", changes={"sale_qty": "10"})
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": f"{resource_type}.{action}",
            "username": username,
            "resource_id": resource_id,
        }

        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=_default))

    @staticmethod
    def log_security_event(
        event_type: str,  # "password_changed", "username_changed", "view_password_disabled"
        username: str,
        details: Optional[str] = None,
    ):
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "event_type": f"security.{event_type}",
            "username": username,
        }

        if details:
            log_entry["details"] = details

        audit_logger.info(json.dumps(log_entry))
