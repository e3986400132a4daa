from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ancestortree.auth import get_current_actor
from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.record_visibility import visible_record, visible_records
from ancestortree.database import get_db
from ancestortree.models.event import Event

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=List[Dict[str, Any]])
def list_events(
    person_id: Optional[str] = None,
    event_type: Optional[str] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    query = db.query(Event)
    if person_id:
        query = query.filter(Event.person_id == person_id)
    if event_type:
        query = query.filter(Event.event_type == event_type)

    rows = query.order_by(Event.id).all()
    return visible_records(db, engine, actor, RecordKind.EVENT, rows)


@router.get("/{event_id}", response_model=Dict[str, Any])
def get_event(
    event_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    record = visible_record(db, engine, actor, RecordKind.EVENT, event_id)
    if record is None:
        raise HTTPException(404, "Event not found")
    return record
