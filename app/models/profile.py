# app/models/profile.py
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class Profile(SQLModel, table=True):
    """
    Dating profile, one per Supabase auth user.

    Identity:
      - id: MUST match Supabase auth.users.id (UUID from JWT "sub")

    Matching flags:
      - is_active: only active profiles are matchable / visible
      - is_searching: true while the owner is waiting for a pairing;
        reset to false once a match is created

    Descriptive fields (name, bio, age, ...) are carried through to match
    results as-is; matchmaking never interprets them.
    """

    __tablename__ = "profiles"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches Supabase auth.users.id",
    )

    name: str = Field(
        max_length=100,
        description="Display name; defaults to the signup name or email",
    )

    bio: str | None = None
    phone: str | None = None
    location: str | None = None

    # e.g. "single", "divorced", "widowed"
    situation: str | None = None

    birthday: date | None = None
    age: int | None = None

    # male | female | non-binary | other
    gender: str | None = None

    interests: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this profile is visible and matchable",
    )

    is_verified: bool = Field(default=False)

    is_searching: bool = Field(
        default=False,
        index=True,
        description="True while the owner is looking for a match",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last modification timestamp (UTC)",
    )
