# Overview: Fixed capability set per role. No inheritance between roles.

from ..constants import Role
from .definitions import Capability
from .helpers import get_all_permission_codes


_OPERATIONAL = frozenset({
    Capability.MANAGE_FINANCIAL,
    Capability.MANAGE_INVENTORY,
    Capability.MANAGE_POS,
    Capability.MANAGE_SUPPLIERS,
    Capability.MANAGE_MEMBERS,
    Capability.VIEW_REPORTS,
    Capability.EXPORT_DATA,
})

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    Role.DEVELOPER: frozenset(get_all_permission_codes()),
    Role.SUPER_ADMIN: _OPERATIONAL | {Capability.MANAGE_USERS, Capability.VIEW_LOGS},
    Role.ADMIN: _OPERATIONAL,
    # Kasir records sales; inventory is readable through the module gate only
    Role.KASIR: frozenset({Capability.MANAGE_POS}),
    Role.STAFF: frozenset({Capability.VIEW_REPORTS}),
    Role.SUPPLIER: frozenset(),
}

ROLE_DISPLAY_NAMES = {
    Role.DEVELOPER: "Developer",
    Role.SUPER_ADMIN: "Super Admin",
    Role.ADMIN: "Administrator",
    Role.KASIR: "Kasir",
    Role.STAFF: "Staff",
    Role.SUPPLIER: "Supplier",
}


def get_role_permissions(role: str) -> frozenset[str]:
    return ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: str, capability: str) -> bool:
    return capability in get_role_permissions(role)


def get_role_display_name(role: str) -> str:
    return ROLE_DISPLAY_NAMES.get(role, role)
