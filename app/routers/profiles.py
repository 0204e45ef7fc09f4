# app/routers/profiles.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import get_current_profile
from app.database import get_session
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import ProfileRead, ProfileUpdate
from app.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["Profiles"])

repo = ProfileRepository()
service = ProfileService(repo)


@router.get("/me", response_model=ProfileRead)
def read_me(current_profile: Profile = Depends(get_current_profile)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires valid Supabase JWT.
    """
    return service.get_me(current_profile)


@router.patch("/me", response_model=ProfileRead)
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Update the authenticated user's profile (partial update).

    Matching state is not editable here; use /find-match.

    Auth:
      - Requires valid Supabase JWT.
    """
    return service.update_me(session, current_profile, payload)
