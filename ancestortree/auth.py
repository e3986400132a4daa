import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import Depends, Header, HTTPException
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from ancestortree.config import settings
from ancestortree.core.actors import ANONYMOUS, Actor, actor_for
from ancestortree.database import get_db
from ancestortree.models.profile import Profile

logger = logging.getLogger(__name__)


# role_lookup(user_id) -> stored role string, or None without a profile
RoleLookup = Callable[[str], Optional[Any]]


@dataclass(frozen=True)
class Credentials:
    token: Optional[str] = None

    @classmethod
    def from_header(cls, authorization: Optional[str]) -> "Credentials":
        if not authorization or not authorization.startswith("Bearer "):
            return cls()
        token = authorization[len("Bearer "):].strip()
        return cls(token or None)


def decode_subject(token: str) -> Optional[str]:
    payload = jwt.decode(
        token,
        settings.SUPABASE_JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
    )
    subject = payload.get("sub")
    return str(subject) if subject else None


def resolve_actor(credentials: Optional[Credentials], role_lookup: RoleLookup) -> Actor:
    """
    Turn request credentials into an Actor.

    Never raises: a missing or bad token, a failing profile lookup or an
    unknown role all resolve to anonymous. A valid token whose user has
    no profile yet is a plain member.
    """
    if credentials is None or not credentials.token:
        return ANONYMOUS

    try:
        user_id = decode_subject(credentials.token)
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        return ANONYMOUS

    if not user_id:
        logger.warning("Bearer token has no subject")
        return ANONYMOUS

    try:
        role = role_lookup(user_id)
    except Exception:
        logger.exception("Role lookup failed for user %s", user_id)
        return ANONYMOUS

    if role is None:
        # Signed in without a profile row yet: an ordinary member
        return Actor.member(user_id)

    return actor_for(user_id, role)


def profile_role_lookup(db: Session) -> RoleLookup:
    def lookup(user_id: str):
        profile = db.query(Profile).filter(Profile.user_id == user_id).first()
        return profile.role if profile else None

    return lookup


# ============================================================
# FASTAPI DEPENDENCY
# ============================================================

def get_current_actor(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Actor:
    return resolve_actor(Credentials.from_header(authorization), profile_role_lookup(db))


def require_signed_in(actor: Actor = Depends(get_current_actor)) -> Actor:
    if actor.is_anonymous:
        raise HTTPException(status_code=401, detail="Sign in required")
    return actor


def require_admin(actor: Actor = Depends(require_signed_in)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=403, detail="Admins only")
    return actor
