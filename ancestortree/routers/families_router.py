from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ancestortree.auth import get_current_actor
from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.record_visibility import visible_record, visible_records
from ancestortree.database import get_db
from ancestortree.models.child import Child
from ancestortree.models.family import Family

router = APIRouter(tags=["Families"])


@router.get("/families", response_model=List[Dict[str, Any]])
def list_families(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    rows = db.query(Family).order_by(Family.sort_order, Family.id).all()
    return visible_records(db, engine, actor, RecordKind.FAMILY, rows)


@router.get("/families/{family_id}", response_model=Dict[str, Any])
def get_family(
    family_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    record = visible_record(db, engine, actor, RecordKind.FAMILY, family_id)
    if record is None:
        raise HTTPException(404, "Family not found")
    return record


@router.get("/children", response_model=List[Dict[str, Any]])
def list_children(
    family_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    query = db.query(Child)
    if family_id is not None:
        query = query.filter(Child.family_id == family_id)

    rows = query.order_by(Child.family_id, Child.sort_order).all()
    return visible_records(db, engine, actor, RecordKind.CHILD, rows)
