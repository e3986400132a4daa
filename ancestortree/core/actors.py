from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Role(str, Enum):
    ANONYMOUS = "anonymous"
    MEMBER = "member"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    """
    Who is asking. Built only through the constructors below so that
    an anonymous actor never carries a user id.
    """

    role: Role
    user_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "Actor":
        return cls(Role.ANONYMOUS)

    @classmethod
    def member(cls, user_id: str) -> "Actor":
        return cls(Role.MEMBER, str(user_id))

    @classmethod
    def admin(cls, user_id: str) -> "Actor":
        return cls(Role.ADMIN, str(user_id))

    @property
    def is_anonymous(self) -> bool:
        return self.role is Role.ANONYMOUS

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def __str__(self) -> str:
        if self.user_id is None:
            return self.role.value
        return f"{self.role.value}:{self.user_id}"


ANONYMOUS = Actor.anonymous()


def parse_role(value: Any) -> Role:
    """
    Parse a loosely typed role value (profile column, request data).

    Only the exact strings "member" and "admin" are recognised; anything
    else, including other casings, is treated as anonymous.
    """
    if isinstance(value, Role):
        return value
    if value == Role.ADMIN.value:
        return Role.ADMIN
    if value == Role.MEMBER.value:
        return Role.MEMBER
    return Role.ANONYMOUS


def actor_for(user_id: Optional[str], role_value: Any) -> Actor:
    if not user_id:
        return ANONYMOUS

    role = parse_role(role_value)
    if role is Role.ADMIN:
        return Actor.admin(user_id)
    if role is Role.MEMBER:
        return Actor.member(user_id)
    return ANONYMOUS
