# Overview: Module-level access rules and the routes each role may open.

from ..constants import Role
from .definitions import Capability
from .roles import has_permission


class Module:
    DASHBOARD = "dashboard"
    FINANCIAL = "financial"
    INVENTORY = "inventory"
    POS = "pos"
    SUPPLIERS = "suppliers"
    MEMBERS = "members"
    REPORTS = "reports"
    USERS = "users"
    ACTIVITY_LOGS = "activity-logs"

    # Order used for navigation and allowed-route listings
    ALL = (DASHBOARD, FINANCIAL, INVENTORY, POS, SUPPLIERS, MEMBERS, REPORTS, USERS, ACTIVITY_LOGS)


# module -> (capability that grants it, role granted it regardless)
_MODULE_RULES = {
    Module.FINANCIAL: (Capability.MANAGE_FINANCIAL, None),
    Module.INVENTORY: (Capability.MANAGE_INVENTORY, Role.KASIR),
    Module.POS: (Capability.MANAGE_POS, None),
    Module.SUPPLIERS: (Capability.MANAGE_SUPPLIERS, Role.SUPPLIER),
    Module.MEMBERS: (Capability.MANAGE_MEMBERS, None),
    Module.REPORTS: (Capability.VIEW_REPORTS, None),
    Module.USERS: (Capability.MANAGE_USERS, None),
    Module.ACTIVITY_LOGS: (Capability.VIEW_LOGS, None),
}


def can_access_module(role: str, module: str) -> bool:
    """
    Whether `role` may open `module`.

    Dashboard is open to every role; unknown modules are closed to everyone.
    KASIR sees inventory and SUPPLIER sees suppliers without holding the
    corresponding MANAGE_* capability (read access only).
    """
    if role not in Role.ALL:
        return False
    if module == Module.DASHBOARD:
        return True
    rule = _MODULE_RULES.get(module)
    if rule is None:
        return False
    capability, extra_role = rule
    return has_permission(role, capability) or role == extra_role


def get_allowed_routes(role: str) -> list[str]:
    return [f"/{module}" for module in Module.ALL if can_access_module(role, module)]
