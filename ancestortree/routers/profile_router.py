from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ancestortree.auth import get_current_actor, require_signed_in
from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.record_visibility import visible_records
from ancestortree.database import get_db
from ancestortree.models.profile import Profile

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("", response_model=List[Dict[str, Any]])
def list_profiles(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    # Anonymous callers get an empty list, not an error
    rows = db.query(Profile).order_by(Profile.full_name).all()
    return visible_records(db, engine, actor, RecordKind.PROFILE, rows)


@router.get("/me", response_model=Dict[str, Any])
def get_my_profile(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_signed_in),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    rows = db.query(Profile).filter(Profile.user_id == actor.user_id).all()
    records = visible_records(db, engine, actor, RecordKind.PROFILE, rows)
    if not records:
        raise HTTPException(404, "User has no profile")
    return records[0]
