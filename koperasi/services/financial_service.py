# Overview: Service-layer operations for the cash-flow ledger; encapsulates business logic and database work.

from __future__ import annotations

from datetime import datetime

from sqlalchemy import case, func, or_

from ..constants import ActivityAction, ActivityModule, TransactionCategory, TransactionType
from ..errors import InvalidStateError, NotFound, ValidationError
from ..extensions import db
from ..formatting import format_currency
from ..models import Supplier, Transaction, User
from ..permissions import Capability
from ..time_utils import utcnow
from . import ledger_rules
from .activity_service import log_activity
from .ledger_rules import PeriodRange
from .permission_service import require_capability


def signed_amount_expr():
    return case(
        (Transaction.type == TransactionType.CASH_IN, Transaction.amount),
        (Transaction.type == TransactionType.CASH_OUT, -Transaction.amount),
        else_=0,
    )


def _live():
    return db.session.query(Transaction).filter(Transaction.deleted_at.is_(None))


def filtered_query(
    *,
    search: str | None = None,
    tx_type: str | None = None,
    category: str | None = None,
    supplier_id: int | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
):
    query = _live()
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Transaction.description.ilike(like), Transaction.notes.ilike(like)))
    if tx_type:
        query = query.filter(Transaction.type == tx_type)
    if category:
        query = query.filter(Transaction.category == category)
    if supplier_id:
        query = query.filter(Transaction.supplier_id == supplier_id)
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at < end)
    return query


def list_transactions(*, limit: int = 20, offset: int = 0, **filters) -> tuple[list[Transaction], int]:
    query = filtered_query(**filters)
    total = query.count()
    items = (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_transaction(transaction_id: int, *, include_deleted: bool = False) -> Transaction:
    tx = db.session.get(Transaction, transaction_id)
    if tx is None or (tx.deleted_at is not None and not include_deleted):
        raise NotFound("Transaction not found")
    return tx


def _ensure_supplier(supplier_id: int | None) -> None:
    if supplier_id is None:
        return
    exists = db.session.query(Supplier.id).filter(
        Supplier.id == supplier_id, Supplier.deleted_at.is_(None)
    ).first()
    if not exists:
        raise ValidationError("Supplier not found", field="supplier_id")


def build_transaction(
    *,
    tx_type: str,
    category: str,
    amount: int,
    description: str,
    payment_method: str,
    created_by_id: int | None,
    notes: str | None = None,
    supplier_id: int | None = None,
    reference_id: int | None = None,
    created_at: datetime | None = None,
) -> Transaction:
    """Validate and stage a ledger entry without committing (used by POS and members too)."""
    if amount <= 0:
        raise ValidationError("Amount must be positive", field="amount")
    if tx_type not in TransactionType.ALL:
        raise ValidationError(f"Unknown transaction type {tx_type}", field="type")
    if category not in TransactionCategory.ALL:
        raise ValidationError(f"Unknown category {category}", field="category")
    ledger_rules.ensure_category_allowed(tx_type, category)
    _ensure_supplier(supplier_id)

    tx = Transaction(
        type=tx_type,
        category=category,
        amount=amount,
        payment_method=payment_method,
        description=description,
        notes=notes,
        supplier_id=supplier_id,
        reference_id=reference_id,
        created_by_id=created_by_id,
    )
    if created_at is not None:
        tx.created_at = created_at
    db.session.add(tx)
    return tx


def create_transaction(*, actor: User, **data) -> Transaction:
    require_capability(actor, Capability.MANAGE_FINANCIAL, resource="financial.create_transaction")
    tx = build_transaction(
        tx_type=data["type"],
        category=data["category"],
        amount=data["amount"],
        description=data["description"],
        payment_method=data.get("payment_method", "CASH"),
        notes=data.get("notes"),
        supplier_id=data.get("supplier_id"),
        created_by_id=actor.id,
    )
    log_activity(
        user=actor,
        module=ActivityModule.FINANCIAL,
        action=ActivityAction.CREATE,
        description=f"Created {tx.type} transaction: {tx.description} - {format_currency(tx.amount)}",
    )
    db.session.commit()
    return tx


def update_transaction(transaction_id: int, *, actor: User, **changes) -> Transaction:
    require_capability(actor, Capability.MANAGE_FINANCIAL, resource="financial.update_transaction")
    tx = get_transaction(transaction_id, include_deleted=True)
    if tx.deleted_at is not None:
        raise InvalidStateError("Cannot update deleted transaction")

    new_type = changes.get("type") or tx.type
    new_category = changes.get("category") or tx.category
    ledger_rules.ensure_category_allowed(new_type, new_category)
    if "supplier_id" in changes:
        _ensure_supplier(changes["supplier_id"])

    for field, value in changes.items():
        setattr(tx, field, value)

    log_activity(
        user=actor,
        module=ActivityModule.FINANCIAL,
        action=ActivityAction.UPDATE,
        description=f"Updated transaction: {tx.description}",
    )
    db.session.commit()
    return tx


def delete_transaction(transaction_id: int, *, actor: User) -> None:
    require_capability(actor, Capability.MANAGE_FINANCIAL, resource="financial.delete_transaction")
    tx = get_transaction(transaction_id, include_deleted=True)
    if tx.deleted_at is not None:
        raise InvalidStateError("Transaction already deleted")
    tx.deleted_at = utcnow()
    log_activity(
        user=actor,
        module=ActivityModule.FINANCIAL,
        action=ActivityAction.DELETE,
        description=f"Deleted transaction: {tx.description} - {format_currency(tx.amount)}",
    )
    db.session.commit()


def get_balance(*, category: str | None = None, end: datetime | None = None) -> int:
    """Balance over all live transactions (optionally one category, optionally before `end`)."""
    query = db.session.query(func.coalesce(func.sum(signed_amount_expr()), 0)).filter(
        Transaction.deleted_at.is_(None)
    )
    if category:
        query = query.filter(Transaction.category == category)
    if end:
        query = query.filter(Transaction.created_at < end)
    return int(query.scalar() or 0)


def get_summary(period: PeriodRange) -> dict:
    """
    Cash-flow summary for a period.

    cash_in/cash_out/net_cash_flow/store_balance cover the period only;
    total_balance is the all-time ledger balance.
    """
    transactions = filtered_query(start=period.start, end=period.end).all()
    summary = ledger_rules.summarize(transactions)
    summary["store_balance"] = ledger_rules.compute_balance(
        tx for tx in transactions if tx.category == TransactionCategory.SALES
    )
    summary["total_balance"] = get_balance()
    summary.update(period.to_dict())
    return summary


def get_chart_data(period: PeriodRange) -> list[dict]:
    transactions = filtered_query(start=period.start, end=period.end).all()
    return ledger_rules.build_chart_series(transactions)


def transactions_for_export(**filters) -> list[Transaction]:
    return filtered_query(**filters).order_by(Transaction.created_at.asc(), Transaction.id.asc()).all()
