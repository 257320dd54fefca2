"""
Officer roster persistence.

Single-row writes commit immediately. The bulk import is the only
operation that spans several rows, and it runs as one transaction.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grant.models.officer import Officer

logger = logging.getLogger(__name__)

EXPORT_MIN_LIMIT = 1
EXPORT_MAX_LIMIT = 500


class ImportRolledBack(Exception):
    """Raised when a bulk import hit a persistence fault and was rolled back."""


def clamp_limit(limit: int) -> int:
    return max(EXPORT_MIN_LIMIT, min(limit, EXPORT_MAX_LIMIT))


def coerce_marks(value: Any) -> int:
    """Non-negative integer; anything unparseable counts as 0."""
    if isinstance(value, bool):
        return int(value)
    try:
        marks = int(value)
    except (TypeError, ValueError):
        try:
            marks = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    return max(0, marks)


def coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


class OfficerRoster:
    """CRUD and bulk import/export over the officers table."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_discord_id(self, discord_id: str) -> Optional[Officer]:
        return self.db.query(Officer).filter(Officer.discord_id == discord_id).first()

    def register(self, discord_id: str, discord_username: str) -> Officer:
        """
        Create the officer if absent, otherwise refresh the username only.

        Marks, rank and blacklist state of an existing officer are untouched.
        """
        officer = self._upsert(discord_id, discord_username=discord_username)
        self.db.commit()
        self.db.refresh(officer)
        return officer

    def update_marks(self, discord_id: str, marks: int) -> None:
        self._update(discord_id, marks=max(0, int(marks)))

    def set_rank(self, discord_id: str, rank: Optional[str]) -> None:
        self._update(discord_id, rank=rank)

    def set_blacklisted(self, discord_id: str, blacklisted: bool) -> None:
        self._update(discord_id, is_blacklisted=bool(blacklisted))

    def remove(self, discord_id: str) -> bool:
        """Delete the officer. Returns True iff a row existed."""
        deleted = self.db.query(Officer).filter(
            Officer.discord_id == discord_id
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted > 0

    def export_officers(self, limit: int, offset: int = 0) -> List[Dict[str, Any]]:
        """One page of officers in insertion order, as wire-format rows."""
        officers = self.db.query(Officer).order_by(
            Officer.officer_id.asc()
        ).offset(max(0, offset)).limit(clamp_limit(limit)).all()
        return [officer.to_export_row() for officer in officers]

    def import_officers(self, rows: Iterable[Any]) -> int:
        """
        Upsert every valid row in a single transaction.

        Rows without a non-empty discord_id and discord_username are skipped
        and not counted. Any persistence fault rolls the whole batch back and
        raises ImportRolledBack.
        """
        count = 0
        try:
            for row in rows:
                if not isinstance(row, dict):
                    continue
                discord_id = str(row.get("discord_id") or "").strip()
                discord_username = str(row.get("discord_username") or "").strip()
                if not discord_id or not discord_username:
                    continue

                rank = row.get("rank")
                self._upsert(
                    discord_id,
                    discord_username=discord_username,
                    marks=coerce_marks(row.get("marks", 0)),
                    rank=str(rank) if rank not in (None, "") else None,
                    is_blacklisted=coerce_flag(row.get("is_blacklisted")),
                )
                self.db.flush()
                count += 1
            self.db.commit()
        except (SQLAlchemyError, OverflowError) as e:
            # OverflowError: the driver rejects integers wider than the column
            self.db.rollback()
            logger.exception("Officer import rolled back after %d rows", count)
            raise ImportRolledBack(str(e)) from e

        return count

    def _upsert(self, discord_id: str, **fields) -> Officer:
        """Insert or update without committing."""
        officer = self.find_by_discord_id(discord_id)
        if officer is None:
            officer = Officer(discord_id=discord_id, **fields)
            self.db.add(officer)
        else:
            for name, value in fields.items():
                setattr(officer, name, value)
            officer.updated_at = datetime.utcnow()
        return officer

    def _update(self, discord_id: str, **fields) -> None:
        fields["updated_at"] = datetime.utcnow()
        self.db.query(Officer).filter(
            Officer.discord_id == discord_id
        ).update(fields, synchronize_session=False)
        self.db.commit()
