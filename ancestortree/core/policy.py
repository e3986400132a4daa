import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Mapping, Optional

from ancestortree.config import settings
from ancestortree.core.actors import Actor
from ancestortree.core.classifier import ClassifiedRecord, RecordLookup, classify
from ancestortree.core.policy_config import (
    PolicyConfig,
    PRIVATE_TIER,
    PUBLIC_TIER,
    get_policy_config,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    visible_fields: FrozenSet[str] = frozenset()
    reason: str = ""

    @classmethod
    def allow(cls, fields, reason: str) -> "Decision":
        return cls(True, frozenset(fields), reason)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, frozenset(), reason)

    def __bool__(self) -> bool:
        return self.allowed


class PolicyEngine:
    """
    Read-access rules for every record kind.

    Rules, first match wins:
      1. admins see everything
      2. profiles: any signed-in actor
      3. structural records (families, children, unattached events/media):
         any signed-in actor
      4. personal records (people, events/media about a person):
         anonymous -> tier 0 without contact data, contact and narrative
                      fields stripped
         member    -> tier 0 and 1, all fields
      5. deny

    The engine holds no mutable state and can be shared between threads.
    """

    def __init__(self, config: Optional[PolicyConfig] = None):
        if config is None:
            config = get_policy_config(settings.POLICY_VERSION)
        config.validate()
        self.config = config

    # ------------------------------------------------------------
    # CLASSIFY
    # ------------------------------------------------------------

    def classify(
        self,
        kind: Any,
        record: Mapping[str, Any],
        lookup: Optional[RecordLookup] = None,
    ) -> ClassifiedRecord:
        return classify(kind, record, self.config, lookup)

    # ------------------------------------------------------------
    # DECIDE
    # ------------------------------------------------------------

    def check_access(
        self,
        actor: Actor,
        kind: Any,
        record: Mapping[str, Any],
        lookup: Optional[RecordLookup] = None,
    ) -> Decision:
        classified = self.classify(kind, record, lookup)
        decision = self.decide(actor, classified, frozenset(record.keys()))

        if not decision.allowed:
            logger.debug(
                "Denied %s read of %s %r: %s",
                actor,
                getattr(classified.kind, "value", classified.kind),
                record.get("id"),
                decision.reason,
            )
        return decision

    def decide(
        self,
        actor: Actor,
        classified: ClassifiedRecord,
        fields: FrozenSet[str],
    ) -> Decision:
        if classified.kind_class is None:
            logger.error("No policy for record kind %r", classified.kind)
            return Decision.deny("unknown record kind")

        if actor.is_admin:
            return Decision.allow(fields, "admin")

        if classified.is_account:
            if actor.is_anonymous:
                return Decision.deny("profiles require sign-in")
            return Decision.allow(fields, "signed in")

        if classified.is_structural:
            if actor.is_anonymous:
                return Decision.deny("family structure requires sign-in")
            return Decision.allow(fields, "signed in")

        if classified.is_personal:
            if actor.is_anonymous:
                return self._decide_anonymous(classified, fields)
            if classified.tier < PRIVATE_TIER:
                return Decision.allow(fields, f"member, tier {classified.tier}")
            return Decision.deny("private record")

        return Decision.deny("no rule matched")

    def _decide_anonymous(self, classified: ClassifiedRecord, fields: FrozenSet[str]) -> Decision:
        if classified.tier != PUBLIC_TIER:
            return Decision.deny("not public")

        if classified.has_contact_data and self.config.anonymous_requires_no_contact:
            return Decision.deny("public record holds contact data")

        # Contact fields are stripped even when the bundle is empty
        return Decision.allow(fields - self.config.anonymous_hidden_fields, "public")


# ============================================================
# MODULE-LEVEL ENTRY POINTS
# ============================================================

@lru_cache(maxsize=None)
def engine_for(version: str) -> PolicyEngine:
    return PolicyEngine(get_policy_config(version))


def get_engine() -> PolicyEngine:
    return engine_for(settings.POLICY_VERSION)


def check_access(
    actor: Actor,
    kind: Any,
    record: Mapping[str, Any],
    lookup: Optional[RecordLookup] = None,
) -> Decision:
    return get_engine().check_access(actor, kind, record, lookup)


def filter_fields(decision: Decision, record: Mapping[str, Any]) -> Dict[str, Any]:
    """Project a record onto the fields a decision allows. Deny yields {}."""
    if not decision.allowed:
        return {}
    return {key: value for key, value in record.items() if key in decision.visible_fields}


def get_policy_engine() -> PolicyEngine:
    """FastAPI dependency; override in tests to exercise other policy versions."""
    return get_engine()
