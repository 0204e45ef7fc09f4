# app/services/profile_service.py
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import DependencyFailure
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository
from app.schemas.profile import ProfileUpdate


class ProfileService:
    """
    Business logic for the caller's own Profile.

    Responsibilities:
      - apply owner edits to descriptive fields
      - keep matchmaking state (is_searching) out of reach of edits
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def get_me(self, current_profile: Profile) -> Profile:
        """Return the current authenticated user's profile."""
        return current_profile

    def update_me(
        self,
        session: Session,
        current_profile: Profile,
        payload: ProfileUpdate,
    ) -> Profile:
        """
        Partial update for profile edits.

        Only fields present in the payload are written. Deactivating a
        profile also withdraws it from matchmaking.
        """
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("name", "") is None:
            # name is NOT NULL; an explicit null means "leave as is"
            changes.pop("name")

        for field, value in changes.items():
            setattr(current_profile, field, value)

        if changes.get("is_active") is False:
            current_profile.is_searching = False

        try:
            return self.repo.update(session, current_profile)
        except SQLAlchemyError:
            session.rollback()
            raise DependencyFailure("Failed to update profile")
