# app/schemas/profile.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

Gender = Literal["male", "female", "non-binary", "other"]


class ProfileRead(SQLModel):
    """Response schema for the caller's own profile."""

    id: uuid.UUID
    name: str
    bio: str | None = None
    phone: str | None = None
    location: str | None = None
    situation: str | None = None
    birthday: date | None = None
    age: int | None = None
    gender: str | None = None
    interests: list[str] = []
    is_active: bool
    is_verified: bool
    is_searching: bool
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(SQLModel):
    """
    Partial profile edit for the authenticated owner.

    Matching state (is_searching), verification and identity are not
    editable through this payload.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    bio: str | None = Field(default=None, max_length=1000)
    phone: str | None = Field(default=None, max_length=30)
    location: str | None = Field(default=None, max_length=200)
    situation: str | None = Field(default=None, max_length=50)
    birthday: date | None = None
    age: int | None = Field(default=None, ge=18, le=120)
    gender: Gender | None = None
    interests: list[str] | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("interests")
    @classmethod
    def normalize_interests(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        # Drop blanks and duplicates, keep first-seen order
        seen: list[str] = []
        for item in v:
            item = item.strip()
            if item and item not in seen:
                seen.append(item)
        return seen
