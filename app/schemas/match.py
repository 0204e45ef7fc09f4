# app/schemas/match.py
"""
Wire shapes for the matchmaking endpoints.

The web client reads camelCase keys (matchedUser, matchScore, createdAt,
userId), so these models serialize by alias.
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchedUser(CamelModel):
    """Public profile fields of the other party."""

    id: uuid.UUID
    name: str
    bio: str | None = None
    age: int | None = None
    location: str | None = None
    gender: str | None = None
    interests: list[str] = []


class MatchDetails(CamelModel):
    id: uuid.UUID
    matched_user: MatchedUser
    match_score: float | None = None
    created_at: datetime


class MatchFoundResponse(CamelModel):
    status: Literal["matched"] = "matched"
    message: str = "Match found!"
    match: MatchDetails


class SearchingResponse(CamelModel):
    status: Literal["searching"] = "searching"
    message: str = "Looking for your perfect match..."
    user_id: uuid.UUID


class MatchHistoryItem(CamelModel):
    """One row of the caller's match history."""

    id: uuid.UUID
    partner: MatchedUser
    status: str
    match_score: float | None = None
    matched_at: datetime


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
