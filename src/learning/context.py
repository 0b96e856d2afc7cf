"""
Read-only learner context handed to the engine at construction time.
"""

from dataclasses import dataclass, field
from typing import FrozenSet
from enum import Enum


class Role(str, Enum):
    ANONYMOUS = "anonymous"
    TRUSTED = "trusted"
    EDUCATOR = "educator"
    MODERATOR = "moderator"
    ADMIN = "admin"


EARN_XP = "earn_xp"

PERMISSION_MATRIX = {
    Role.ANONYMOUS: ("view_content", "create_posts", EARN_XP),
    Role.TRUSTED: ("view_content", "create_posts", EARN_XP, "moderate_content", "access_advanced_features"),
    Role.EDUCATOR: (
        "view_content", "create_posts", EARN_XP, "moderate_content", "access_advanced_features",
        "create_educational_content",
    ),
    Role.MODERATOR: (
        "view_content", "create_posts", EARN_XP, "moderate_content", "access_advanced_features",
        "create_educational_content", "manage_users",
    ),
    Role.ADMIN: (
        "view_content", "create_posts", EARN_XP, "moderate_content", "access_advanced_features",
        "create_educational_content", "manage_users", "assign_roles", "system_management",
    ),
}


@dataclass(frozen=True)
class LearnerContext:
    user_id: str = ""
    nickname: str = ""
    role: Role = Role.ANONYMOUS
    xp: int = 0
    trust_score: float = 0.0
    # per-user revocations issued by the trust system, applied on top of the role
    revoked_permissions: FrozenSet[str] = field(default_factory=frozenset)

    def has_permission(self, permission: str) -> bool:
        if permission in self.revoked_permissions:
            return False
        return permission in PERMISSION_MATRIX.get(Role(self.role), ())

    @property
    def can_earn_xp(self) -> bool:
        return self.has_permission(EARN_XP)
