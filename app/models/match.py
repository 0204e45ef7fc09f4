# app/models/match.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import SQLModel, Field

MATCH_STATUSES = ("pending", "matched", "rejected", "blocked")


class Match(SQLModel, table=True):
    """
    A pairing between two profiles.

    The pair is stored in canonical order (profile1_id < profile2_id) so
    that UNIQUE(profile1_id, profile2_id) rejects the same two people
    being inserted twice, whichever of them initiated the request.
    """

    __tablename__ = "matches"
    __table_args__ = (
        UniqueConstraint("profile1_id", "profile2_id", name="uq_matches_pair"),
        CheckConstraint("profile1_id <> profile2_id", name="ck_matches_distinct"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in MATCH_STATUSES) + ")",
            name="ck_matches_status",
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    profile1_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Smaller of the two profile ids",
    )

    profile2_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
        description="Larger of the two profile ids",
    )

    # pending | matched | rejected | blocked
    status: str = Field(
        default="pending",
        index=True,
        description="Match status lifecycle",
    )

    # Compatibility estimate in [0, 1]
    match_score: float | None = Field(default=None, ge=0, le=1)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
