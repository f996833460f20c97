import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dropx.models.activity import UserActivity

logger = logging.getLogger(__name__)


def log_user_activity(
    db: Session,
    user_id: int,
    activity_type: str,
    description: str,
    details: Optional[dict] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    """Record an activity row inside a savepoint.

    A failed insert is logged and rolled back to the savepoint; the caller's
    unit of work carries on.
    """
    try:
        with db.begin_nested():
            db.add(
                UserActivity(
                    user_id=user_id,
                    activity_type=activity_type,
                    description=description,
                    details=details or {},
                    ip_address=ip_address or "",
                    user_agent=(user_agent or "")[:255],
                )
            )
    except SQLAlchemyError as e:
        logger.warning("Failed to log user activity %s for user %s: %s", activity_type, user_id, e)
