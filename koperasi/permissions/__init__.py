# Overview: Permission system package.
# Re-exports the role/capability/module rules used by services and routes.

from .categories import PermissionCategory
from .definitions import (
    Capability,
    PERMISSION_DEFINITIONS,
    SYSTEM_PERMISSIONS,
    USER_PERMISSIONS,
    FINANCIAL_PERMISSIONS,
    OPERATIONS_PERMISSIONS,
    REPORTING_PERMISSIONS,
)
from .helpers import (
    get_all_permission_codes,
    capabilities_by_category,
    describe_capability,
    is_known_capability,
)
from .roles import (
    ROLE_PERMISSIONS,
    ROLE_DISPLAY_NAMES,
    get_role_permissions,
    has_permission,
    get_role_display_name,
)
from .modules import Module, can_access_module, get_allowed_routes

__all__ = [
    "PermissionCategory",
    "Capability",
    "PERMISSION_DEFINITIONS",
    "SYSTEM_PERMISSIONS",
    "USER_PERMISSIONS",
    "FINANCIAL_PERMISSIONS",
    "OPERATIONS_PERMISSIONS",
    "REPORTING_PERMISSIONS",
    "get_all_permission_codes",
    "capabilities_by_category",
    "describe_capability",
    "is_known_capability",
    "ROLE_PERMISSIONS",
    "ROLE_DISPLAY_NAMES",
    "get_role_permissions",
    "has_permission",
    "get_role_display_name",
    "Module",
    "can_access_module",
    "get_allowed_routes",
]
