# Overview: Enumerations shared by models, schemas and services.

"""
Plain string constants rather than Enum classes: values are stored as-is in
String columns and echoed in JSON, so the literal is the contract.
"""


class Role:
    DEVELOPER = "DEVELOPER"
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    KASIR = "KASIR"
    STAFF = "STAFF"
    SUPPLIER = "SUPPLIER"

    ALL = (DEVELOPER, SUPER_ADMIN, ADMIN, KASIR, STAFF, SUPPLIER)


class TransactionType:
    CASH_IN = "CASH_IN"
    CASH_OUT = "CASH_OUT"
    TRANSFER = "TRANSFER"
    ADJUSTMENT = "ADJUSTMENT"

    ALL = (CASH_IN, CASH_OUT, TRANSFER, ADJUSTMENT)


class TransactionCategory:
    SALES = "SALES"
    PURCHASE = "PURCHASE"
    OPERATIONAL = "OPERATIONAL"
    MEMBER_DEPOSIT = "MEMBER_DEPOSIT"
    MEMBER_WITHDRAWAL = "MEMBER_WITHDRAWAL"
    OTHER = "OTHER"

    ALL = (SALES, PURCHASE, OPERATIONAL, MEMBER_DEPOSIT, MEMBER_WITHDRAWAL, OTHER)


class PaymentMethod:
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    E_WALLET = "E_WALLET"
    OTHER = "OTHER"

    ALL = (CASH, BANK_TRANSFER, E_WALLET, OTHER)


class OrderStatus:
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    ALL = (PENDING, PROCESSING, COMPLETED, CANCELLED)


class StockMovementType:
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"

    ALL = (IN, OUT, ADJUSTMENT)


class ActivityModule:
    AUTH = "AUTH"
    FINANCIAL = "FINANCIAL"
    POS = "POS"
    INVENTORY = "INVENTORY"
    SUPPLIER = "SUPPLIER"
    MEMBER = "MEMBER"
    USER = "USER"

    ALL = (AUTH, FINANCIAL, POS, INVENTORY, SUPPLIER, MEMBER, USER)


class ActivityAction:
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    ACCESS_DENIED = "ACCESS_DENIED"

    ALL = (CREATE, UPDATE, DELETE, LOGIN, LOGOUT, ACCESS_DENIED)
