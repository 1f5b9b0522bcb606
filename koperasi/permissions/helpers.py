# Overview: Lookups over the capability definitions (codes, descriptions, grouping).

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS

_BY_CODE = {code: (name, description, category) for code, name, description, category in PERMISSION_DEFINITIONS}


def get_all_permission_codes() -> list[str]:
    return [code for code, *_ in PERMISSION_DEFINITIONS]


def is_known_capability(code: str) -> bool:
    return code in _BY_CODE


def describe_capability(code: str) -> dict | None:
    """{code, name, description, category} for a capability, None if unknown."""
    entry = _BY_CODE.get(code)
    if entry is None:
        return None
    name, description, category = entry
    return {"code": code, "name": name, "description": description, "category": category}


def capabilities_by_category() -> dict[str, list[str]]:
    """Capability codes grouped by category, categories in display order."""
    grouped = {category: [] for category in PermissionCategory.ALL}
    for code, _, _, category in PERMISSION_DEFINITIONS:
        grouped[category].append(code)
    return {category: codes for category, codes in grouped.items() if codes}
