"""Fixed three-role model for tenant members."""

from enum import StrEnum
from typing import assert_never


class Role(StrEnum):
    """A user's role within one tenant."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


def role_rank(role: Role) -> int:
    """Privilege rank of a role; higher ranks include lower ones."""
    match role:
        case Role.OWNER:
            return 3
        case Role.ADMIN:
            return 2
        case Role.MEMBER:
            return 1
        case _:
            assert_never(role)


def role_satisfies(role: Role, minimum: Role) -> bool:
    """Check whether ``role`` grants at least the privileges of ``minimum``.

    Example:
        >>> role_satisfies(Role.OWNER, Role.ADMIN)
        True
        >>> role_satisfies(Role.MEMBER, Role.ADMIN)
        False
    """
    return role_rank(role) >= role_rank(minimum)
