"""Append-only audit trail for roster mutations."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from grant.models.audit import AuditAction, OfficerAuditLog

logger = logging.getLogger(__name__)


class AuditTrail:
    """Writes and reads OfficerAuditLog rows. Append-only: no update or delete."""

    def __init__(self, db: Session):
        self.db = db

    def log(
        self,
        action: str,
        actor_discord_id: str,
        target_discord_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> OfficerAuditLog:
        """Append one entry and commit it."""
        if action not in AuditAction.ALL:
            raise ValueError(f"Unknown audit action: {action}")

        entry = OfficerAuditLog(
            action=action,
            actor_discord_id=actor_discord_id,
            target_discord_id=target_discord_id,
            metadata_json=dict(metadata or {}),
        )
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)

        logger.debug("Audit %s actor=%s target=%s", action, actor_discord_id, target_discord_id)
        return entry

    def entries(self, action: Optional[str] = None) -> List[OfficerAuditLog]:
        """List entries oldest-first, optionally filtered by action tag."""
        query = self.db.query(OfficerAuditLog)
        if action is not None:
            query = query.filter(OfficerAuditLog.action == action)
        return query.order_by(OfficerAuditLog.id.asc()).all()
