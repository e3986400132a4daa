from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ancestortree.auth import get_current_actor
from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.record_visibility import visible_record, visible_records
from ancestortree.database import get_db
from ancestortree.models.media import Media

router = APIRouter(prefix="/media", tags=["Media"])


@router.get("", response_model=List[Dict[str, Any]])
def list_media(
    person_id: Optional[str] = None,
    event_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    query = db.query(Media)
    if person_id:
        query = query.filter(Media.person_id == person_id)
    if event_id is not None:
        query = query.filter(Media.event_id == event_id)

    rows = query.order_by(Media.uploaded_at.desc(), Media.id.desc()).all()
    return visible_records(db, engine, actor, RecordKind.MEDIA, rows)


@router.get("/{media_id}", response_model=Dict[str, Any])
def get_media(
    media_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    record = visible_record(db, engine, actor, RecordKind.MEDIA, media_id)
    if record is None:
        raise HTTPException(404, "Media not found")
    return record
