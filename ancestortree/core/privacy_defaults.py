import logging
from typing import Any, Dict, Iterable, List, Mapping, MutableMapping

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ancestortree.core.classifier import coerce_tier, has_contact_data
from ancestortree.core.policy_config import MEMBERS_TIER, PUBLIC_TIER, PolicyConfig
from ancestortree.models.person import Person

logger = logging.getLogger(__name__)


def assign_default_tier(data: MutableMapping[str, Any], config: PolicyConfig) -> MutableMapping[str, Any]:
    """
    Fill in the privacy level for a new person.

    Public (tier 0) must be chosen explicitly, e.g. for historical figures.
    """
    if data.get("privacy_level") is None:
        data["privacy_level"] = config.default_privacy_tier
    return data


def needs_tightening(person: Mapping[str, Any], config: PolicyConfig) -> bool:
    return (
        coerce_tier(person.get("privacy_level")) == PUBLIC_TIER
        and bool(person.get("is_living"))
        and has_contact_data(person, config.contact_fields)
    )


def sweep_records(
    records: Iterable[Mapping[str, Any]],
    config: PolicyConfig,
) -> List[Dict[str, Any]]:
    """
    Return copies of `records` with living, public people who have
    contact data moved to members-only. Tiers are only ever raised.
    """
    swept = []
    for record in records:
        record = dict(record)
        if needs_tightening(record, config):
            record["privacy_level"] = MEMBERS_TIER
        swept.append(record)
    return swept


# ============================================================
# DATABASE
# ============================================================

def tighten_person(person: Person, config: PolicyConfig) -> bool:
    """
    Corrective check for a single pending row. Call before commit so the
    new contact data and the raised tier land in the same transaction.
    """
    values = {
        "privacy_level": person.privacy_level,
        "is_living": person.is_living,
    }
    for name in config.contact_fields:
        values[name] = getattr(person, name, None)

    if not needs_tightening(values, config):
        return False

    logger.info("Raising privacy level of person %s to members-only", person.id)
    person.privacy_level = MEMBERS_TIER
    return True


def _has_contact_clause(config: PolicyConfig):
    clauses = []
    for name in sorted(config.contact_fields):
        column = getattr(Person, name)
        clauses.append(column.isnot(None) & (func.trim(column) != ""))
    return or_(*clauses)


def sweep_people(db: Session, config: PolicyConfig) -> int:
    """
    Bulk corrective pass over the people table, in one transaction.
    Returns the number of rows changed; a second run returns 0.
    """
    try:
        changed = (
            db.query(Person)
            .filter(
                Person.privacy_level == PUBLIC_TIER,
                Person.is_living == True,  # noqa: E712
                _has_contact_clause(config),
            )
            .update({Person.privacy_level: MEMBERS_TIER}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    # Rows already loaded in this session still hold the old tier
    db.expire_all()

    if changed:
        logger.info("Privacy sweep moved %d people to members-only", changed)
    return changed
