"""Role-based access for tenant members."""

from chronicle.core.permissions.roles import Role, role_rank, role_satisfies


__all__ = [
    "Role",
    "role_rank",
    "role_satisfies",
]
