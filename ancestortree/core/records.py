from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ancestortree.core.classifier import RecordLookup
from ancestortree.core.policy_config import RecordKind
from ancestortree.models.child import Child
from ancestortree.models.event import Event
from ancestortree.models.family import Family
from ancestortree.models.media import Media
from ancestortree.models.person import Person
from ancestortree.models.profile import Profile


MODEL_BY_KIND = {
    RecordKind.PERSON: Person,
    RecordKind.FAMILY: Family,
    RecordKind.CHILD: Child,
    RecordKind.EVENT: Event,
    RecordKind.MEDIA: Media,
    RecordKind.PROFILE: Profile,
}


def as_record(row) -> Dict[str, Any]:
    """Column values of an ORM row as a plain dict."""
    return {column.key: getattr(row, column.key) for column in row.__table__.columns}


def fetch_by_kind(db: Session, kind: RecordKind, *filters) -> List[Any]:
    model = MODEL_BY_KIND[kind]
    query = db.query(model)
    if filters:
        query = query.filter(*filters)
    return query.all()


def fetch_one(db: Session, kind: RecordKind, record_id) -> Optional[Any]:
    model = MODEL_BY_KIND[kind]
    return db.query(model).filter(model.id == record_id).first()


def db_lookup(db: Session) -> RecordLookup:
    """
    Resolve foreign keys for the classifier. Results are memoised for the
    life of the returned callable, which is one request.
    """
    cache: Dict[tuple, Optional[Dict[str, Any]]] = {}

    def lookup(kind: RecordKind, record_id) -> Optional[Dict[str, Any]]:
        key = (kind, record_id)
        if key not in cache:
            row = fetch_one(db, kind, record_id)
            cache[key] = as_record(row) if row is not None else None
        return cache[key]

    return lookup


def mapping_lookup(records) -> RecordLookup:
    """Lookup over an in-memory corpus of (kind, record) pairs."""
    index = {(kind, record.get("id")): record for kind, record in records}

    def lookup(kind: RecordKind, record_id):
        return index.get((kind, record_id))

    return lookup
