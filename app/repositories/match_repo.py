# app/repositories/match_repo.py
import uuid

from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.match import Match


class MatchRepository:
    """
    Data access layer for matches.

    NOTE:
      - create() flushes but does not commit; the uniqueness constraint
        on (profile1_id, profile2_id) fires at flush time and the service
        handles the resulting IntegrityError.
    """

    def get_by_pair(
        self,
        session: Session,
        profile1_id: uuid.UUID,
        profile2_id: uuid.UUID,
    ) -> Match | None:
        stmt = select(Match).where(
            Match.profile1_id == profile1_id,
            Match.profile2_id == profile2_id,
        )
        return session.exec(stmt).first()

    def list_for_profile(
        self,
        session: Session,
        profile_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Match]:
        stmt = (
            select(Match)
            .where(
                or_(
                    Match.profile1_id == profile_id,
                    Match.profile2_id == profile_id,
                )
            )
            .order_by(Match.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, match: Match) -> Match:
        """
        Insert a Match without committing, but ensure id is populated.
        """
        session.add(match)
        session.flush()
        session.refresh(match)
        return match
