"""
BidHub Server - Admin Role-Based Access Control

Permission names use the form 'category:action'. An admin role stores its
grants as a nested map {category: {action: bool}}; super_admin is granted
everything regardless of the map.
"""

from typing import Iterable, Optional

SUPER_ADMIN_ROLE = "super_admin"

# ==================== Permission Constants ====================

PERMISSIONS = {
    # User management
    "USERS_VIEW": "users:view",
    "USERS_EDIT": "users:edit",
    "USERS_SUSPEND": "users:suspend",
    "USERS_DELETE": "users:delete",

    # Categories
    "CATEGORIES_VIEW": "categories:view",
    "CATEGORIES_CREATE": "categories:create",
    "CATEGORIES_EDIT": "categories:edit",
    "CATEGORIES_DELETE": "categories:delete",

    # Content moderation
    "CONTENT_VIEW": "content:view",
    "CONTENT_MODERATE": "content:moderate",

    # Bids and requirements
    "BIDS_VIEW": "bids:view",
    "JOBS_VIEW": "jobs:view",

    # Payments and finance
    "FINANCE_VIEW": "finance:view",
    "FINANCE_RELEASE": "finance:release",
    "FINANCE_REFUND": "finance:refund",

    # Disputes
    "DISPUTES_VIEW": "disputes:view",
    "DISPUTES_MANAGE": "disputes:manage",

    # Subscription plans
    "PLANS_VIEW": "plans:view",
    "PLANS_MANAGE": "plans:manage",

    # Analytics
    "ANALYTICS_VIEW": "analytics:view",
    "ANALYTICS_EXPORT": "analytics:export",

    # Platform settings
    "SETTINGS_VIEW": "settings:view",
    "SETTINGS_EDIT": "settings:edit",

    # Admin management
    "ADMINS_MANAGE": "admins:manage",
}


# ==================== Default Role Grants ====================

DEFAULT_ROLE_PERMISSIONS = {
    SUPER_ADMIN_ROLE: list(PERMISSIONS.values()),

    "moderator": [
        PERMISSIONS["USERS_VIEW"],
        PERMISSIONS["USERS_SUSPEND"],
        PERMISSIONS["CONTENT_VIEW"],
        PERMISSIONS["CONTENT_MODERATE"],
        PERMISSIONS["BIDS_VIEW"],
        PERMISSIONS["JOBS_VIEW"],
        PERMISSIONS["DISPUTES_VIEW"],
        PERMISSIONS["DISPUTES_MANAGE"],
        PERMISSIONS["ANALYTICS_VIEW"],
    ],

    "support": [
        PERMISSIONS["USERS_VIEW"],
        PERMISSIONS["DISPUTES_VIEW"],
        PERMISSIONS["CONTENT_VIEW"],
        PERMISSIONS["ANALYTICS_VIEW"],
    ],

    "finance": [
        PERMISSIONS["FINANCE_VIEW"],
        PERMISSIONS["FINANCE_RELEASE"],
        PERMISSIONS["FINANCE_REFUND"],
        PERMISSIONS["PLANS_VIEW"],
        PERMISSIONS["ANALYTICS_VIEW"],
        PERMISSIONS["ANALYTICS_EXPORT"],
    ],
}


def SplitPermission(permission: str) -> tuple[str, str]:
    """
    Split 'category:action' into its parts

    Raises:
        ValueError: If the permission is not of the form 'category:action'
    """
    category, separator, action = permission.partition(":")
    if not separator or not category or not action:
        raise ValueError(f"Invalid permission '{permission}', expected 'category:action'")
    return category, action


def BuildPermissionMap(permissions: Iterable[str]) -> dict:
    """
    Convert a list of permission names into the stored nested map

    Args:
        permissions: Permission names like 'settings:view'

    Returns:
        dict: {category: {action: True}}
    """
    permission_map = {}
    for permission in permissions:
        category, action = SplitPermission(permission)
        permission_map.setdefault(category, {})[action] = True
    return permission_map


def AdminHasPermission(admin_role: Optional[dict], permission: str) -> bool:
    """
    Check if an admin role grants a permission

    Args:
        admin_role: Admin role info (role, permissions, active) or None
        permission: Permission name like 'settings:edit'

    Returns:
        bool: True if the role is active and is super_admin or grants the permission
    """
    if not admin_role or not admin_role.get("active", False):
        return False

    if admin_role.get("role") == SUPER_ADMIN_ROLE:
        return True

    category, action = SplitPermission(permission)
    permissions = admin_role.get("permissions") or {}
    return bool(permissions.get(category, {}).get(action, False))
