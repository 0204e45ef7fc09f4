# app/routers/matches.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import get_current_profile
from app.core.config import get_settings
from app.database import get_session
from app.models.profile import Profile
from app.repositories.match_repo import MatchRepository
from app.repositories.profile_repo import ProfileRepository
from app.schemas.match import (
    ErrorResponse,
    MatchFoundResponse,
    MatchHistoryItem,
    SearchingResponse,
)
from app.services.match_service import MatchService

settings = get_settings()

router = APIRouter(tags=["Matches"])

profile_repo = ProfileRepository()
match_repo = MatchRepository()
service = MatchService(profile_repo, match_repo, settings.DEFAULT_MATCH_SCORE)

ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/find-match",
    response_model=MatchFoundResponse | SearchingResponse,
    responses=ERROR_RESPONSES,
)
def find_match(
    session: Session = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Pair the caller with another searching user, or keep them waiting.

    Returns status="matched" with the partner's public profile, or
    status="searching" when nobody else is waiting. Safe to call again
    after a 500: the caller is left in the searching state.

    Auth:
      - Requires valid Supabase JWT.
    """
    return service.request_match(session, current_profile)


@router.get(
    "/matches/me",
    response_model=list[MatchHistoryItem],
    responses=ERROR_RESPONSES,
)
def list_my_matches(
    session: Session = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
):
    """
    List the caller's matches (newest first) with partner details.
    """
    return service.list_history(session, current_profile, skip, limit)
