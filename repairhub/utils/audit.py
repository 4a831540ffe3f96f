import logging

from sqlalchemy.orm import Session
from repairhub.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_action(
    db: Session,
    user_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    description: str | None = None,
) -> None:
    """
    Write an audit log entry.

    Args:
        db:          Active DB session (adds but does NOT commit - caller commits)
        user_id:     ID of the account performing the action (None = system action)
        action:      Verb: CREATE, UPDATE, DELETE, ROLE_TRANSITION, COMPLETE_PROFILE, etc.
        entity_type: Model name: "Company", "Truck", "Driver", etc.
        entity_id:   Primary key of the affected record
        description: Human-readable description

    Usage:
        log_action(db, caller.id, "CREATE", "Truck", truck.id,
                   f"Registered truck {truck.licensePlate}")
        db.commit()
    """
    entry = AuditLog(
        userId=user_id,
        action=action,
        entityType=entity_type,
        entityId=entity_id,
        description=description,
    )
    db.add(entry)
    logger.info(f"{action} {entity_type}:{entity_id} by user:{user_id}")
    # Do NOT commit here - let the caller's transaction commit everything atomically
