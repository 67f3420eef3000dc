"""Mutation boundary for vouchers, processes, outputs and sales.

Each service mutation replaces a record's old effect with its new one inside
the open session transaction and only flushes. run_mutation commits once at
the end, so reversal and reapplication land together or not at all.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.audit import AuditLog
from app.core.context import SessionContext
from app.core.exceptions import InventoryError, PersistenceError, ValidationError
from app.schemas.result import MutationResult

logger = logging.getLogger(__name__)


@dataclass
class Mutation:
    """What a service mutation did, for the caller and the audit log."""
    id: Optional[int]
    message: str
    changes: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)


def run_mutation(
    db: Session,
    session: Optional[SessionContext],
    action: str,
    resource_type: str,
    fn: Callable[[], Mutation],
) -> MutationResult:
    if session is None or not session.username:
        err = ValidationError("You must be logged in to change records.")
        return MutationResult(success=False, message=err.message, error=err.error)

    try:
        outcome = fn()
        db.commit()
    except InventoryError as e:
        db.rollback()
        logger.info(f"{resource_type}.{action} rejected for {session.username}: {e.message}")
        return MutationResult(success=False, message=e.message, error=e.error)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"{resource_type}.{action} failed for {session.username}: {e}", exc_info=True)
        err = PersistenceError()
        return MutationResult(success=False, message=err.message, error=err.error)

    AuditLog.log_action(action, resource_type, outcome.id, session.username, outcome.changes)

    message = " ".join([outcome.message, *outcome.warnings])
    return MutationResult(success=True, message=message, id=outcome.id)
