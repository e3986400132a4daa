from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ancestortree.core.actors import Actor
from ancestortree.core.classifier import RecordLookup
from ancestortree.core.policy import PolicyEngine, filter_fields, get_engine
from ancestortree.core.policy_config import PRIVATE_TIER, RecordKind


@dataclass(frozen=True)
class Violation:
    actor: Actor
    kind: RecordKind
    record_id: Any
    # None when the whole row should not have been visible
    field: Optional[str]
    reason: str

    def as_dict(self) -> dict:
        return {
            "actor": str(self.actor),
            "kind": getattr(self.kind, "value", self.kind),
            "record_id": self.record_id,
            "field": self.field,
            "reason": self.reason,
        }


def evaluate_corpus(
    records: Iterable[Tuple[RecordKind, Mapping[str, Any]]],
    actors: Sequence[Actor],
    engine: Optional[PolicyEngine] = None,
    lookup: Optional[RecordLookup] = None,
) -> List[Violation]:
    """
    Run every actor against every record and report reads that should
    never happen:

    - a contact field visible to an anonymous actor
    - a tier 2 record visible to anyone but an admin

    An empty list means the policy held for this corpus.
    """
    engine = engine or get_engine()
    contact_fields = engine.config.contact_fields
    violations: List[Violation] = []

    for kind, record in records:
        classified = engine.classify(kind, record, lookup)

        for actor in actors:
            decision = engine.check_access(actor, kind, record, lookup)
            if not decision.allowed:
                continue

            if actor.is_anonymous:
                visible = filter_fields(decision, record)
                for field in sorted(contact_fields & visible.keys()):
                    violations.append(
                        Violation(actor, kind, record.get("id"), field, "contact field visible to anonymous")
                    )

            if not actor.is_admin and classified.tier == PRIVATE_TIER:
                violations.append(
                    Violation(actor, kind, record.get("id"), None, "private record visible to non-admin")
                )

    return violations
