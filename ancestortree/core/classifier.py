import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from ancestortree.core.policy_config import (
    KindClass,
    PolicyConfig,
    PRIVATE_TIER,
    RecordKind,
    TIERS,
)

logger = logging.getLogger(__name__)


# lookup(kind, id) -> record mapping, or None when it does not exist
RecordLookup = Callable[[RecordKind, Any], Optional[Mapping[str, Any]]]


@dataclass(frozen=True)
class ClassifiedRecord:
    kind: Union[RecordKind, str]
    # None when the kind is not one the policy knows about
    kind_class: Optional[KindClass]
    tier: Optional[int] = None
    has_contact_data: bool = False
    is_living: Optional[bool] = None
    # Person whose privacy settings govern this record
    subject_id: Optional[str] = None

    @property
    def is_structural(self) -> bool:
        return self.kind_class is KindClass.STRUCTURAL

    @property
    def is_personal(self) -> bool:
        return self.kind_class is KindClass.PERSONAL

    @property
    def is_account(self) -> bool:
        return self.kind_class is KindClass.ACCOUNT


def is_set(value: Any) -> bool:
    """Form inputs submit '' for cleared fields; treat blank text as unset."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def has_contact_data(person: Mapping[str, Any], contact_fields) -> bool:
    return any(is_set(person.get(name)) for name in contact_fields)


def coerce_tier(value: Any) -> int:
    """
    Stored privacy level as an int in 0..2.

    Anything missing or unparseable is classified private.
    """
    if isinstance(value, bool):
        value = None
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())

    if isinstance(value, int) and value in TIERS:
        return value

    logger.warning("Unrecognised privacy level %r, treating record as private", value)
    return PRIVATE_TIER


def parse_kind(kind: Any) -> Optional[RecordKind]:
    if isinstance(kind, RecordKind):
        return kind
    try:
        return RecordKind(kind)
    except ValueError:
        return None


def classify_person(
    person: Mapping[str, Any],
    config: PolicyConfig,
    kind: RecordKind = RecordKind.PERSON,
) -> ClassifiedRecord:
    return ClassifiedRecord(
        kind=kind,
        kind_class=KindClass.PERSONAL,
        tier=coerce_tier(person.get("privacy_level")),
        has_contact_data=has_contact_data(person, config.contact_fields),
        is_living=bool(person.get("is_living")),
        subject_id=person.get("id"),
    )


def _unresolved(kind: RecordKind, subject_id: Any) -> ClassifiedRecord:
    logger.warning(
        "%s record references %r which could not be resolved, treating it as private",
        kind.value,
        subject_id,
    )
    return ClassifiedRecord(
        kind=kind,
        kind_class=KindClass.PERSONAL,
        tier=PRIVATE_TIER,
        has_contact_data=False,
        subject_id=subject_id,
    )


def _inherit_from_person(
    kind: RecordKind,
    person_id: Any,
    config: PolicyConfig,
    lookup: Optional[RecordLookup],
) -> ClassifiedRecord:
    person = lookup(RecordKind.PERSON, person_id) if lookup else None
    if person is None:
        return _unresolved(kind, person_id)
    return classify_person(person, config, kind=kind)


def classify(
    kind: Any,
    record: Mapping[str, Any],
    config: PolicyConfig,
    lookup: Optional[RecordLookup] = None,
) -> ClassifiedRecord:
    """
    Compute the predicates the policy engine decides on.

    Events and media that reference a person take on that person's tier
    and contact flag. Media attached to an event resolve through the
    event to its person, so an image from a private person's memorial is
    as private as the person.
    """
    record_kind = parse_kind(kind)
    if record_kind is None or record_kind not in config.kind_classes:
        return ClassifiedRecord(kind=kind, kind_class=None)

    kind_class = config.kind_classes[record_kind]

    if record_kind is RecordKind.PERSON:
        return classify_person(record, config)

    if record_kind is RecordKind.EVENT and is_set(record.get("person_id")):
        return _inherit_from_person(record_kind, record["person_id"], config, lookup)

    if record_kind is RecordKind.MEDIA:
        if is_set(record.get("person_id")):
            return _inherit_from_person(record_kind, record["person_id"], config, lookup)

        if is_set(record.get("event_id")):
            event = lookup(RecordKind.EVENT, record["event_id"]) if lookup else None
            if event is None:
                return _unresolved(record_kind, record["event_id"])
            if is_set(event.get("person_id")):
                return _inherit_from_person(record_kind, event["person_id"], config, lookup)

    if kind_class is KindClass.PERSONAL:
        # Personal kind with nobody to inherit from: nothing to open up
        return ClassifiedRecord(kind=record_kind, kind_class=kind_class, tier=PRIVATE_TIER)

    return ClassifiedRecord(kind=record_kind, kind_class=kind_class)
