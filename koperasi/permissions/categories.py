# Overview: Capability categories, used to group capabilities in listings.


class PermissionCategory:
    SYSTEM = "SYSTEM"
    USERS = "USERS"
    FINANCIAL = "FINANCIAL"
    OPERATIONS = "OPERATIONS"
    REPORTING = "REPORTING"

    # Display order
    ALL = (SYSTEM, USERS, FINANCIAL, OPERATIONS, REPORTING)
