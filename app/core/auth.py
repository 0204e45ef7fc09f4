# app/core/auth.py
import logging
import uuid
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from supabase import AuthError, AuthRetryableError

from app.core.config import get_settings
from app.core.errors import DependencyFailure, Unauthorized
from app.core.supabase_client import supabase_admin
from app.database import get_session
from app.models.profile import Profile
from app.repositories.profile_repo import ProfileRepository

settings = get_settings()
logger = logging.getLogger(__name__)

# HTTP Bearer scheme:
# - auto_error=False => a missing Authorization header does not raise
#   FastAPI's 403; we answer with our own 401 Unauthorized instead.
bearer_scheme = HTTPBearer(auto_error=False)

profile_repo = ProfileRepository()

NAME_MAX_LENGTH = 100


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT) locally.

    Verification:
      - signature (SUPABASE_JWT_SECRET / SUPABASE_JWT_ALG)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Raises:
        Unauthorized: if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise Unauthorized(details="Invalid or expired token")


def is_auth_outage(exc: AuthError) -> bool:
    """True when Supabase Auth failed on its side (retryable), not the token."""
    if isinstance(exc, AuthRetryableError):
        return True
    status_code = getattr(exc, "status", None)
    return isinstance(status_code, int) and status_code >= 500


def fetch_token_claims(token: str) -> dict[str, Any]:
    """
    Ask Supabase Auth who owns `token`.

    Used when no JWT secret is configured. The result is shaped like
    the JWT claims so callers don't care which path ran.
    """
    try:
        response = supabase_admin().auth.get_user(token)
    except AuthError as exc:
        if is_auth_outage(exc):
            logger.exception("Supabase Auth unavailable while verifying token")
            raise DependencyFailure("Failed to verify credentials")
        raise Unauthorized(details="Invalid or expired token")
    except Exception:
        logger.exception("Unexpected error while verifying token with Supabase Auth")
        raise DependencyFailure("Failed to verify credentials")

    user = response.user if response else None
    if user is None:
        raise Unauthorized(details="Invalid or expired token")

    return {
        "sub": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
    }


def verify_token(token: str) -> dict[str, Any]:
    if settings.SUPABASE_JWT_SECRET:
        return decode_access_token(token)
    return fetch_token_claims(token)


def default_profile_name(claims: dict[str, Any]) -> str:
    """
    Pick a display name for a freshly provisioned profile.

    Same rule as the signup hook: metadata "name", else the full email;
    the subject id only when both are missing. Cut to the column width.
    """
    metadata = claims.get("user_metadata") or {}
    name = (metadata.get("name") or "").strip()
    if not name:
        name = (claims.get("email") or "").strip() or str(claims.get("sub"))
    return name[:NAME_MAX_LENGTH]


def get_current_profile(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Profile:
    """
    Resolve the caller's Profile from a Supabase bearer token.

    Flow:
      1. No Authorization header => Unauthorized.
      2. Verify token => extract 'sub' (auth user id).
      3. Convert 'sub' to UUID to match Profile.id type.
      4. Load the profile row.
      5. If missing, provision a minimal one (the signup hook may not
         have run yet for this user).

    Raises:
        Unauthorized: missing, malformed or rejected token.
        DependencyFailure: the profile could not be loaded or created.
    """
    if credentials is None:
        raise Unauthorized(details="Missing bearer token")

    claims = verify_token(credentials.credentials)
    sub = claims.get("sub")
    if not sub:
        raise Unauthorized(details="Token missing sub")

    # Supabase provides sub as a string; enforce UUID
    try:
        sub_uuid = uuid.UUID(str(sub))
    except ValueError:
        raise Unauthorized(details="Invalid sub in token")

    try:
        profile = profile_repo.get_by_id(session, sub_uuid)
        if profile is None:
            logger.info("Provisioning profile for new user %s", sub_uuid)
            profile = profile_repo.create(
                session,
                Profile(id=sub_uuid, name=default_profile_name(claims)),
            )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to load profile for user %s", sub_uuid)
        raise DependencyFailure("Failed to load profile")

    return profile
