from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping

from ancestortree.models.person import CONTACT_FIELDS, MEMBER_ONLY_FIELDS


class ConfigurationError(Exception):
    """Raised when a policy configuration cannot be used to build an engine."""


class RecordKind(str, Enum):
    PERSON = "people"
    FAMILY = "families"
    CHILD = "children"
    EVENT = "events"
    MEDIA = "media"
    PROFILE = "profiles"


class KindClass(str, Enum):
    # Tiered record about a person (or inheriting one)
    PERSONAL = "personal"
    # Relationship / graph record, visible to any signed-in actor
    STRUCTURAL = "structural"
    # Account records
    ACCOUNT = "account"


PUBLIC_TIER = 0
MEMBERS_TIER = 1
PRIVATE_TIER = 2
TIERS = (PUBLIC_TIER, MEMBERS_TIER, PRIVATE_TIER)


DEFAULT_KIND_CLASSES: Dict[RecordKind, KindClass] = {
    RecordKind.PERSON: KindClass.PERSONAL,
    # Events and media start structural; a person reference upgrades them
    RecordKind.EVENT: KindClass.STRUCTURAL,
    RecordKind.MEDIA: KindClass.STRUCTURAL,
    RecordKind.FAMILY: KindClass.STRUCTURAL,
    RecordKind.CHILD: KindClass.STRUCTURAL,
    RecordKind.PROFILE: KindClass.ACCOUNT,
}


@dataclass(frozen=True)
class PolicyConfig:
    version: str
    default_privacy_tier: int = MEMBERS_TIER
    # Anonymous readers only get tier-0 rows with an empty contact bundle
    anonymous_requires_no_contact: bool = True
    contact_fields: FrozenSet[str] = frozenset(CONTACT_FIELDS)
    member_only_fields: FrozenSet[str] = frozenset(MEMBER_ONLY_FIELDS)
    kind_classes: Mapping[RecordKind, KindClass] = field(
        default_factory=lambda: dict(DEFAULT_KIND_CLASSES),
        hash=False,
    )

    def __post_init__(self):
        # Read-only copy so a registered config cannot be changed in place
        object.__setattr__(self, "kind_classes", MappingProxyType(dict(self.kind_classes)))

    @property
    def anonymous_hidden_fields(self) -> FrozenSet[str]:
        return self.contact_fields | self.member_only_fields

    def validate(self) -> None:
        missing = [kind.value for kind in RecordKind if kind not in self.kind_classes]
        if missing:
            raise ConfigurationError(
                f"Policy {self.version!r} does not classify record kinds: {', '.join(missing)}"
            )

        for kind, kind_class in self.kind_classes.items():
            if not isinstance(kind, RecordKind) or not isinstance(kind_class, KindClass):
                raise ConfigurationError(
                    f"Policy {self.version!r} has an invalid kind entry: {kind!r} -> {kind_class!r}"
                )

        if self.kind_classes[RecordKind.PERSON] is not KindClass.PERSONAL:
            raise ConfigurationError(f"Policy {self.version!r} must keep people as personal records")

        if self.kind_classes[RecordKind.PROFILE] is not KindClass.ACCOUNT:
            raise ConfigurationError(f"Policy {self.version!r} must keep profiles as account records")

        if self.default_privacy_tier not in TIERS:
            raise ConfigurationError(
                f"Policy {self.version!r} has invalid default tier {self.default_privacy_tier!r}"
            )

        if not self.contact_fields:
            raise ConfigurationError(f"Policy {self.version!r} declares no contact fields")


# ============================================================
# VERSION REGISTRY
# ============================================================

POLICY_VERSIONS: Dict[str, PolicyConfig] = {
    # Security hardening: members-only default, anonymous safety net
    "2026-02-26": PolicyConfig(version="2026-02-26"),
    # Same contract, enforced by stripping fields instead of hiding rows
    "field-filtering": PolicyConfig(
        version="field-filtering",
        anonymous_requires_no_contact=False,
    ),
}

CURRENT_POLICY_VERSION = "2026-02-26"


def get_policy_config(version: str = CURRENT_POLICY_VERSION) -> PolicyConfig:
    try:
        config = POLICY_VERSIONS[version]
    except KeyError:
        raise ConfigurationError(f"Unknown policy version: {version!r}") from None

    config.validate()
    return config
