# app/services/match_service.py
import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session

from app.core.errors import AppError, DependencyFailure, InternalError
from app.models.match import Match
from app.models.profile import Profile
from app.repositories.match_repo import MatchRepository
from app.repositories.profile_repo import ProfileRepository
from app.schemas.match import (
    MatchDetails,
    MatchFoundResponse,
    MatchHistoryItem,
    MatchedUser,
    SearchingResponse,
)

logger = logging.getLogger(__name__)


def canonical_pair(a: uuid.UUID, b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    """
    Order two profile ids smaller-first.

    The order carries no meaning; it only lets UNIQUE(profile1_id,
    profile2_id) catch the same pair inserted from either side.
    """
    if a == b:
        raise ValueError("a profile cannot be paired with itself")
    return (a, b) if a < b else (b, a)


def to_matched_user(profile: Profile) -> MatchedUser:
    return MatchedUser(
        id=profile.id,
        name=profile.name,
        bio=profile.bio,
        age=profile.age,
        location=profile.location,
        gender=profile.gender,
        interests=list(profile.interests or []),
    )


class MatchService:
    """
    Mutual matchmaking.

    Coordination between concurrent callers happens only through the
    database: the shared is_searching flag plus the unique constraint on
    the canonical (profile1_id, profile2_id) pair. Nothing is held in
    process memory between requests.

    Each step below is its own committed round trip; a later failure does
    not undo an earlier step.
    """

    def __init__(
        self,
        profile_repo: ProfileRepository,
        match_repo: MatchRepository,
        default_score: float,
    ):
        self.profile_repo = profile_repo
        self.match_repo = match_repo
        self.default_score = default_score

    def request_match(
        self,
        session: Session,
        caller: Profile,
    ) -> MatchFoundResponse | SearchingResponse:
        """
        Find (or wait for) a partner for `caller`.

        Steps:
          1. Flag the caller as searching.
          2. Look up one other active, searching profile.
          3. None found => SearchingResponse; caller stays flagged.
          4. Canonicalize the pair.
          5. Insert a Match(status='matched'). On failure the caller stays
             flagged so the next request retries naturally.
          6. Clear both flags. A failure here is logged, not raised: the
             match row is already the source of truth.
          7. Return MatchFoundResponse.

        Raises:
            DependencyFailure: steps 1, 2 or 5 failed.
            InternalError: anything unexpected.
        """
        caller_id = caller.id
        try:
            return self._request_match(session, caller, caller_id)
        except AppError:
            raise
        except Exception:
            logger.exception("Unexpected error in find-match for user %s", caller_id)
            raise InternalError()

    def _request_match(
        self,
        session: Session,
        caller: Profile,
        caller_id: uuid.UUID,
    ) -> MatchFoundResponse | SearchingResponse:
        logger.info("Find match request from user: %s", caller_id)

        # 1) Announce search intent
        try:
            self.profile_repo.set_searching(session, caller, True)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Error updating search status for user %s", caller_id)
            raise DependencyFailure("Failed to update search status")

        logger.info("Set user %s to searching status", caller_id)

        # 2) Candidate lookup
        try:
            candidate = self.profile_repo.find_searching_candidate(session, caller_id)
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Error searching for matches for user %s", caller_id)
            raise DependencyFailure("Failed to search for matches")

        # 3) Nobody else is waiting
        if candidate is None:
            logger.info("No matches found for user %s, staying in search mode", caller_id)
            return SearchingResponse(user_id=caller_id)

        candidate_id = candidate.id
        logger.info("Match found! User %s matched with %s", caller_id, candidate_id)

        # 4) Canonical ordering
        profile1_id, profile2_id = canonical_pair(caller_id, candidate_id)
        matched_user = to_matched_user(candidate)

        # 5) Create the match
        try:
            match = self.match_repo.create(
                session,
                Match(
                    profile1_id=profile1_id,
                    profile2_id=profile2_id,
                    status="matched",
                    match_score=self.default_score,
                ),
            )
            response = MatchFoundResponse(
                match=MatchDetails(
                    id=match.id,
                    matched_user=matched_user,
                    match_score=match.match_score,
                    created_at=match.created_at,
                )
            )
            session.commit()
        except IntegrityError:
            session.rollback()
            if self._pair_exists(session, profile1_id, profile2_id):
                logger.warning(
                    "Match between %s and %s already exists; user %s stays searching",
                    profile1_id,
                    profile2_id,
                    caller_id,
                )
                raise DependencyFailure(
                    "Failed to create match",
                    details="match already exists for this pair",
                )
            logger.exception("Integrity error creating match for user %s", caller_id)
            raise DependencyFailure("Failed to create match")
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Error creating match for user %s", caller_id)
            raise DependencyFailure("Failed to create match")

        # 6) Clear both flags (degraded, not fatal, on failure)
        try:
            self.profile_repo.clear_searching(session, [caller_id, candidate_id])
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.warning(
                "Match %s created but search flags of %s and %s were not cleared",
                response.match.id,
                caller_id,
                candidate_id,
                exc_info=True,
            )

        logger.info(
            "Successfully created match %s between users %s and %s",
            response.match.id,
            caller_id,
            candidate_id,
        )
        return response

    def _pair_exists(
        self,
        session: Session,
        profile1_id: uuid.UUID,
        profile2_id: uuid.UUID,
    ) -> bool:
        """Whether a rejected insert lost to an existing row for the pair."""
        try:
            return self.match_repo.get_by_pair(session, profile1_id, profile2_id) is not None
        except SQLAlchemyError:
            session.rollback()
            logger.warning("Could not re-read match %s/%s", profile1_id, profile2_id, exc_info=True)
            return False

    def list_history(
        self,
        session: Session,
        caller: Profile,
        skip: int = 0,
        limit: int = 50,
    ) -> list[MatchHistoryItem]:
        """
        Matches naming the caller, newest first, with partner details.

        Matches whose partner row is gone are skipped.
        """
        try:
            matches = self.match_repo.list_for_profile(session, caller.id, skip, limit)
            partner_ids = [
                m.profile2_id if m.profile1_id == caller.id else m.profile1_id
                for m in matches
            ]
            partners = {
                p.id: p for p in self.profile_repo.list_by_ids(session, partner_ids)
            }
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Error fetching match history for user %s", caller.id)
            raise DependencyFailure("Failed to fetch match history")

        items: list[MatchHistoryItem] = []
        for match, partner_id in zip(matches, partner_ids):
            partner = partners.get(partner_id)
            if partner is None:
                continue
            items.append(
                MatchHistoryItem(
                    id=match.id,
                    partner=to_matched_user(partner),
                    status=match.status,
                    match_score=match.match_score,
                    matched_at=match.created_at,
                )
            )
        return items
