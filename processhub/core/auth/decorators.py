"""
Role-based access helpers for ProcessHub.

Roles form a simple hierarchy: user < supervisor < admin.
"""

from typing import Any, Dict

ROLE_HIERARCHY: Dict[str, int] = {"user": 1, "supervisor": 2, "admin": 3}


def get_user_role_level(role: Any) -> int:
    """
    Get the numeric level for a role.

    Args:
        role: The role name (string or role enum)

    Returns:
        Numeric level (higher = more privileges), 0 for unknown roles
    """
    value = role.value if hasattr(role, "value") else str(role)
    return ROLE_HIERARCHY.get(value, 0)


def check_user_role(role: Any, required_role: str) -> bool:
    """
    Check if a role satisfies the required role.

    Args:
        role: The caller's role
        required_role: The minimum role required

    Returns:
        True if the role is at least the required one, False otherwise
    """
    return get_user_role_level(role) >= get_user_role_level(required_role)


def is_admin(role: Any) -> bool:
    """Check whether a role is the admin role."""
    return get_user_role_level(role) == ROLE_HIERARCHY["admin"]


def is_supervisor_or_admin(role: Any) -> bool:
    """Check whether a role may manage other users."""
    return check_user_role(role, "supervisor")
