from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ancestortree.core.actors import Actor
from ancestortree.core.policy import PolicyEngine, filter_fields
from ancestortree.core.policy_config import RecordKind
from ancestortree.core.records import as_record, db_lookup, fetch_one


def visible_records(
    db: Session,
    engine: PolicyEngine,
    actor: Actor,
    kind: RecordKind,
    rows: Iterable[Any],
) -> List[Dict[str, Any]]:
    """
    Filter ORM rows down to what `actor` may read.
    Denied rows are dropped; allowed rows are projected to their visible fields.
    """
    lookup = db_lookup(db)
    results = []
    for row in rows:
        record = as_record(row)
        decision = engine.check_access(actor, kind, record, lookup)
        if decision.allowed:
            results.append(filter_fields(decision, record))
    return results


def visible_record(
    db: Session,
    engine: PolicyEngine,
    actor: Actor,
    kind: RecordKind,
    record_id,
) -> Optional[Dict[str, Any]]:
    """
    One record, projected, or None when it is missing or denied.
    Callers answer both cases the same way so a denial does not reveal
    that the record exists.
    """
    row = fetch_one(db, kind, record_id)
    if row is None:
        return None

    record = as_record(row)
    decision = engine.check_access(actor, kind, record, db_lookup(db))
    if not decision.allowed:
        return None
    return filter_fields(decision, record)
