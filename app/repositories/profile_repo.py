# app/repositories/profile_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session, select

from app.models.profile import Profile


class ProfileRepository:
    """
    Data access layer for Profile.

    Responsibilities:
      - Pure DB operations (queries + flag updates)
      - No FastAPI, no HTTP, no business logic

    NOTE:
      - Methods that write do NOT commit; the service decides where each
        storage round trip ends.
    """

    def get_by_id(self, session: Session, profile_id: uuid.UUID) -> Profile | None:
        """Return a Profile by primary key, or None if not found."""
        return session.get(Profile, profile_id)

    def list_by_ids(
        self,
        session: Session,
        profile_ids: list[uuid.UUID],
    ) -> list[Profile]:
        if not profile_ids:
            return []
        stmt = select(Profile).where(Profile.id.in_(profile_ids))
        return list(session.exec(stmt).all())

    def find_searching_candidate(
        self,
        session: Session,
        exclude_id: uuid.UUID,
    ) -> Profile | None:
        """
        Return one active, searching profile other than `exclude_id`.

        The LIMIT is applied in SQL; which of several searchers comes back
        is unspecified.
        """
        stmt = (
            select(Profile)
            .where(
                Profile.is_searching == True,  # noqa: E712
                Profile.is_active == True,  # noqa: E712
                Profile.id != exclude_id,
            )
            .limit(1)
        )
        return session.exec(stmt).first()

    def set_searching(
        self,
        session: Session,
        profile: Profile,
        searching: bool,
    ) -> Profile:
        profile.is_searching = searching
        profile.updated_at = datetime.now(timezone.utc)
        session.add(profile)
        session.flush()
        return profile

    def clear_searching(
        self,
        session: Session,
        profile_ids: list[uuid.UUID],
    ) -> None:
        """Set is_searching = false on every listed profile."""
        now = datetime.now(timezone.utc)
        for profile in self.list_by_ids(session, profile_ids):
            profile.is_searching = False
            profile.updated_at = now
            session.add(profile)
        session.flush()

    def create(self, session: Session, profile: Profile) -> Profile:
        """Insert a new Profile and return the persisted row."""
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile

    def update(self, session: Session, profile: Profile) -> Profile:
        """Persist changes to an existing Profile."""
        profile.updated_at = datetime.now(timezone.utc)
        session.add(profile)
        session.commit()
        session.refresh(profile)
        return profile
