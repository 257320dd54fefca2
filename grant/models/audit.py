"""
Officer audit log model.

Every privileged roster mutation leaves one row here. Rows are
append-only: nothing in the service layer updates or deletes them.
"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, JSON
from grant.database import Base


class OfficerAuditLog(Base):
    """
    Immutable audit entry for a privileged action.

    Invariants:
    - Once written, never edited or deleted
    - Append-only
    - Written only after the mutation it describes has been committed
    """
    __tablename__ = "officer_audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    action = Column(String(32), nullable=False, index=True)  # One of AuditAction
    actor_discord_id = Column(String(32), nullable=False, index=True)
    target_discord_id = Column(String(32), nullable=True, index=True)  # Null for bulk actions
    metadata_json = Column(JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)


# Action tags for consistency
class AuditAction:
    """Fixed vocabulary of audit action tags."""
    REGISTER = "register"
    PROMOTE = "promote"
    DEMOTE = "demote"
    REMOVE = "remove"
    BLACKLIST = "blacklist"

    MARKS_ADD = "marks_add"
    MARKS_SUBTRACT = "marks_subtract"

    # Developer maintenance
    DEVELOPER_EXPORT = "developer_export"
    DEVELOPER_IMPORT = "developer_import"

    ALL = frozenset({
        REGISTER, PROMOTE, DEMOTE, REMOVE, BLACKLIST,
        MARKS_ADD, MARKS_SUBTRACT, DEVELOPER_EXPORT, DEVELOPER_IMPORT,
    })
