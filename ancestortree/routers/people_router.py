import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ancestortree.auth import get_current_actor, require_signed_in
from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, get_policy_engine
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.privacy_defaults import assign_default_tier, tighten_person
from ancestortree.core.record_visibility import visible_record, visible_records
from ancestortree.database import get_db
from ancestortree.models.person import Person
from ancestortree.schemas.person_schema import PersonCreate, PersonUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/people", tags=["People"])


# ---------------------------------------------------------------------
# LIST
# ---------------------------------------------------------------------
@router.get("", response_model=List[Dict[str, Any]])
def list_people(
    search: Optional[str] = None,
    generation: Optional[int] = None,
    chi: Optional[int] = None,
    status: Literal["all", "living", "deceased"] = "all",
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    query = db.query(Person)

    if search and search.strip():
        query = query.filter(Person.display_name.ilike(f"%{search.strip()}%"))
    if generation is not None:
        query = query.filter(Person.generation == generation)
    if chi is not None:
        query = query.filter(Person.chi == chi)
    if status == "living":
        query = query.filter(Person.is_living == True)  # noqa: E712
    elif status == "deceased":
        query = query.filter(Person.is_living == False)  # noqa: E712

    rows = query.order_by(Person.generation, Person.display_name).all()
    return visible_records(db, engine, actor, RecordKind.PERSON, rows)


# ---------------------------------------------------------------------
# GET ONE
# ---------------------------------------------------------------------
@router.get("/{person_id}", response_model=Dict[str, Any])
def get_person(
    person_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    record = visible_record(db, engine, actor, RecordKind.PERSON, person_id)
    if record is None:
        raise HTTPException(404, "Person not found")
    return record


# ---------------------------------------------------------------------
# CREATE
# ---------------------------------------------------------------------
@router.post("", response_model=Dict[str, Any], status_code=201)
def create_person(
    data: PersonCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_signed_in),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    if db.query(Person).filter(Person.handle == data.handle).first():
        raise HTTPException(400, "Handle already exists")

    values = assign_default_tier(data.model_dump(), engine.config)
    person = Person(**values)

    try:
        db.add(person)
        db.flush()
        tighten_person(person, engine.config)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(person)
    logger.info("Person %s created by %s with privacy level %s", person.id, actor, person.privacy_level)

    return visible_record(db, engine, actor, RecordKind.PERSON, person.id) or {"id": person.id}


# ---------------------------------------------------------------------
# UPDATE (admin or self)
# ---------------------------------------------------------------------
@router.patch("/{person_id}", response_model=Dict[str, Any])
def update_person(
    person_id: str,
    data: PersonUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_signed_in),
    engine: PolicyEngine = Depends(get_policy_engine),
):
    person = db.query(Person).filter(Person.id == person_id).first()

    if not person:
        raise HTTPException(404, "Person not found")

    is_self = person.user_id is not None and person.user_id == actor.user_id

    if not actor.is_admin and not is_self:
        # Hidden records answer the same as missing ones
        if visible_record(db, engine, actor, RecordKind.PERSON, person_id) is None:
            raise HTTPException(404, "Person not found")
        raise HTTPException(403, "Not allowed to edit this person")

    try:
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(person, key, value)

        # Contact edits and the corrective tier check commit together
        tighten_person(person, engine.config)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(person)
    return visible_record(db, engine, actor, RecordKind.PERSON, person.id) or {"id": person.id}
