# Overview: Capability definitions (code, name, description, category).

from .categories import PermissionCategory


class Capability:
    ACCESS_ALL = "ACCESS_ALL"
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_ROLES = "MANAGE_ROLES"
    VIEW_LOGS = "VIEW_LOGS"
    MANAGE_FINANCIAL = "MANAGE_FINANCIAL"
    MANAGE_INVENTORY = "MANAGE_INVENTORY"
    MANAGE_POS = "MANAGE_POS"
    MANAGE_SUPPLIERS = "MANAGE_SUPPLIERS"
    MANAGE_MEMBERS = "MANAGE_MEMBERS"
    VIEW_REPORTS = "VIEW_REPORTS"
    EXPORT_DATA = "EXPORT_DATA"


SYSTEM_PERMISSIONS = [
    (Capability.ACCESS_ALL, "Access everything", "Unrestricted access to every module", PermissionCategory.SYSTEM),
    (Capability.VIEW_LOGS, "View activity logs", "Browse the activity log and its statistics", PermissionCategory.SYSTEM),
]

USER_PERMISSIONS = [
    (Capability.MANAGE_USERS, "Manage users", "Create, edit and deactivate user accounts", PermissionCategory.USERS),
    (Capability.MANAGE_ROLES, "Manage roles", "Change the role assigned to a user", PermissionCategory.USERS),
]

FINANCIAL_PERMISSIONS = [
    (Capability.MANAGE_FINANCIAL, "Manage financial", "Record and edit cash-flow transactions", PermissionCategory.FINANCIAL),
    (Capability.MANAGE_MEMBERS, "Manage members", "Record member deposits and withdrawals", PermissionCategory.FINANCIAL),
]

OPERATIONS_PERMISSIONS = [
    (Capability.MANAGE_INVENTORY, "Manage inventory", "Create products and record stock movements", PermissionCategory.OPERATIONS),
    (Capability.MANAGE_POS, "Use point of sale", "Create and cancel POS orders", PermissionCategory.OPERATIONS),
    (Capability.MANAGE_SUPPLIERS, "Manage suppliers", "Create, edit and delete suppliers", PermissionCategory.OPERATIONS),
]

REPORTING_PERMISSIONS = [
    (Capability.VIEW_REPORTS, "View reports", "Open dashboards and reports", PermissionCategory.REPORTING),
    (Capability.EXPORT_DATA, "Export data", "Download CSV exports", PermissionCategory.REPORTING),
]

PERMISSION_DEFINITIONS = (
    SYSTEM_PERMISSIONS
    + USER_PERMISSIONS
    + FINANCIAL_PERMISSIONS
    + OPERATIONS_PERMISSIONS
    + REPORTING_PERMISSIONS
)
