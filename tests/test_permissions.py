"""Role -> capability and role -> module rules (no database)."""

import pytest

from koperasi.constants import Role
from koperasi.middleware import module_for_path
from koperasi.permissions import (
    Capability,
    Module,
    PermissionCategory,
    can_access_module,
    capabilities_by_category,
    describe_capability,
    get_all_permission_codes,
    get_allowed_routes,
    get_role_display_name,
    get_role_permissions,
    has_permission,
    is_known_capability,
)


class TestCapabilities:
    def test_developer_has_everything(self):
        assert get_role_permissions(Role.DEVELOPER) == frozenset(get_all_permission_codes())

    def test_super_admin_cannot_manage_roles(self):
        assert has_permission(Role.SUPER_ADMIN, Capability.MANAGE_USERS)
        assert not has_permission(Role.SUPER_ADMIN, Capability.MANAGE_ROLES)

    def test_supplier_has_nothing(self):
        assert get_role_permissions(Role.SUPPLIER) == frozenset()

    def test_unknown_role(self):
        assert not has_permission("JANITOR", Capability.VIEW_REPORTS)
        assert get_role_permissions("JANITOR") == frozenset()

    def test_codes_are_known(self):
        assert is_known_capability(Capability.MANAGE_POS)
        assert not is_known_capability("FLY")

    def test_describe_and_group(self):
        assert describe_capability(Capability.EXPORT_DATA)["category"] == PermissionCategory.REPORTING
        assert describe_capability("FLY") is None
        grouped = capabilities_by_category()
        assert list(grouped) == list(PermissionCategory.ALL)
        assert sorted(c for codes in grouped.values() for c in codes) == sorted(get_all_permission_codes())


@pytest.mark.parametrize("role, module, expected", [
    (Role.KASIR, Module.SUPPLIERS, False),
    (Role.KASIR, Module.POS, True),
    (Role.KASIR, Module.INVENTORY, True),
    (Role.KASIR, Module.FINANCIAL, False),
    (Role.ADMIN, Module.FINANCIAL, True),
    (Role.ADMIN, Module.USERS, False),
    (Role.SUPER_ADMIN, Module.USERS, True),
    (Role.SUPER_ADMIN, Module.ACTIVITY_LOGS, True),
    (Role.STAFF, Module.REPORTS, True),
    (Role.STAFF, Module.POS, False),
    (Role.SUPPLIER, Module.SUPPLIERS, True),
    (Role.SUPPLIER, Module.INVENTORY, False),
    (Role.SUPPLIER, Module.DASHBOARD, True),
    (Role.DEVELOPER, "settings", False),
    ("JANITOR", Module.DASHBOARD, False),
])
def test_module_access(role, module, expected):
    assert can_access_module(role, module) is expected


def test_allowed_routes_for_kasir():
    assert get_allowed_routes(Role.KASIR) == ["/dashboard", "/inventory", "/pos"]


def test_display_names():
    assert get_role_display_name(Role.KASIR) == "Kasir"


@pytest.mark.parametrize("path, module", [
    ("/api/pos/orders", "pos"),
    ("/api/activity-logs", "activity-logs"),
    ("/api/dashboard", "dashboard"),
    ("/api/auth/login", None),
    ("/api/health", None),
    ("/api/unknown/thing", None),
    ("/static/app.js", None),
])
def test_module_for_path(path, module):
    assert module_for_path(path) == module
