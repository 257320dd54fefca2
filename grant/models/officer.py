"""Officer roster model."""
from datetime import datetime
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, String
from grant.database import Base


class Officer(Base):
    """
    A guild officer, keyed by the platform user id.

    Invariants enforced here:
    - discord_id is unique (one row per external user) and never rewritten
    - marks never goes below zero (clamped in the service layer, checked by the DB)
    """
    __tablename__ = "officers"
    __table_args__ = (
        CheckConstraint("marks >= 0", name="ck_officers_marks_non_negative"),
    )

    # Insertion-order key - exports page over this
    officer_id = Column(Integer, primary_key=True, autoincrement=True)
    discord_id = Column(String(32), nullable=False, unique=True, index=True)
    discord_username = Column(String(100), nullable=False)
    marks = Column(Integer, nullable=False, default=0)
    rank = Column(String(100), nullable=True)
    is_blacklisted = Column(Boolean, nullable=False, default=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_export_row(self) -> dict:
        """Row shape used by the export/import wire format."""
        return {
            "discord_id": self.discord_id,
            "discord_username": self.discord_username,
            "marks": int(self.marks or 0),
            "rank": self.rank,
            "is_blacklisted": bool(self.is_blacklisted),
        }
