# Overview: Service-layer operations for member savings; deposits and withdrawals on the shared ledger.

"""
Member Service

Member savings have no table of their own. A deposit is a CASH_IN /
MEMBER_DEPOSIT transaction described "Setoran Anggota - <name>", a
withdrawal a CASH_OUT / MEMBER_WITHDRAWAL transaction described
"Penarikan Anggota - <name>". The member is identified by the name after
the prefix; a member's balance is their deposits minus their withdrawals.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func

from ..constants import ActivityAction, ActivityModule, TransactionCategory, TransactionType
from ..errors import InvalidStateError
from ..extensions import db
from ..formatting import format_currency
from ..models import Transaction, User
from ..permissions import Capability
from .activity_service import log_activity
from .concurrency import begin_write_transaction
from .financial_service import build_transaction
from .permission_service import require_capability


DEPOSIT_PREFIX = "Setoran Anggota - "
WITHDRAWAL_PREFIX = "Penarikan Anggota - "

MEMBER_CATEGORIES = (TransactionCategory.MEMBER_DEPOSIT, TransactionCategory.MEMBER_WITHDRAWAL)


def member_name_from_description(description: str) -> str | None:
    for prefix in (DEPOSIT_PREFIX, WITHDRAWAL_PREFIX):
        if description.startswith(prefix):
            name = description[len(prefix):].strip()
            return name or None
    return None


def _member_transactions():
    return db.session.query(Transaction).filter(
        Transaction.deleted_at.is_(None),
        Transaction.category.in_(MEMBER_CATEGORIES),
    )


def get_member_balance(member_name: str) -> int:
    balance = 0
    rows = _member_transactions().filter(
        Transaction.description.in_([DEPOSIT_PREFIX + member_name, WITHDRAWAL_PREFIX + member_name])
    ).all()
    for tx in rows:
        balance += tx.amount if tx.category == TransactionCategory.MEMBER_DEPOSIT else -tx.amount
    return balance


def record_deposit(
    *,
    member_name: str,
    amount: int,
    actor: User,
    payment_method: str = "CASH",
    notes: str | None = None,
) -> Transaction:
    require_capability(actor, Capability.MANAGE_MEMBERS, resource="members.deposit")
    tx = build_transaction(
        tx_type=TransactionType.CASH_IN,
        category=TransactionCategory.MEMBER_DEPOSIT,
        amount=amount,
        description=DEPOSIT_PREFIX + member_name,
        payment_method=payment_method,
        notes=notes,
        created_by_id=actor.id,
    )
    log_activity(
        user=actor,
        module=ActivityModule.MEMBER,
        action=ActivityAction.CREATE,
        description=f"Recorded deposit for {member_name}: {format_currency(amount)}",
    )
    db.session.commit()
    return tx


def record_withdrawal(
    *,
    member_name: str,
    amount: int,
    actor: User,
    payment_method: str = "CASH",
    notes: str | None = None,
) -> Transaction:
    """Withdraw from a member's savings; refused when it exceeds their balance."""
    require_capability(actor, Capability.MANAGE_MEMBERS, resource="members.withdrawal")
    # Hold the write lock across the balance read and the insert
    begin_write_transaction()
    balance = get_member_balance(member_name)
    if amount > balance:
        db.session.rollback()
        raise InvalidStateError(
            f"Insufficient savings balance for {member_name}",
            details={"member_name": member_name, "balance": balance, "amount": amount},
        )
    tx = build_transaction(
        tx_type=TransactionType.CASH_OUT,
        category=TransactionCategory.MEMBER_WITHDRAWAL,
        amount=amount,
        description=WITHDRAWAL_PREFIX + member_name,
        payment_method=payment_method,
        notes=notes,
        created_by_id=actor.id,
    )
    log_activity(
        user=actor,
        module=ActivityModule.MEMBER,
        action=ActivityAction.CREATE,
        description=f"Recorded withdrawal for {member_name}: {format_currency(amount)}",
    )
    db.session.commit()
    return tx


def list_member_transactions(
    *,
    member_name: str | None = None,
    kind: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[Transaction], int]:
    query = _member_transactions()
    if member_name:
        query = query.filter(Transaction.description.ilike(f"%{member_name}%"))
    if kind == "deposit":
        query = query.filter(Transaction.category == TransactionCategory.MEMBER_DEPOSIT)
    elif kind == "withdrawal":
        query = query.filter(Transaction.category == TransactionCategory.MEMBER_WITHDRAWAL)
    if start:
        query = query.filter(Transaction.created_at >= start)
    if end:
        query = query.filter(Transaction.created_at < end)
    total = query.count()
    items = (
        query.order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total


def get_member_stats() -> dict:
    rows = (
        db.session.query(Transaction.category, func.count(Transaction.id), func.coalesce(func.sum(Transaction.amount), 0))
        .filter(Transaction.deleted_at.is_(None), Transaction.category.in_(MEMBER_CATEGORIES))
        .group_by(Transaction.category)
        .all()
    )
    stats = {category: (int(count), int(total)) for category, count, total in rows}
    deposits, deposit_amount = stats.get(TransactionCategory.MEMBER_DEPOSIT, (0, 0))
    withdrawals, withdrawal_amount = stats.get(TransactionCategory.MEMBER_WITHDRAWAL, (0, 0))
    return {
        "total_deposits": deposits,
        "total_withdrawals": withdrawals,
        "total_deposit_amount": deposit_amount,
        "total_withdrawal_amount": withdrawal_amount,
        "balance": deposit_amount - withdrawal_amount,
    }


def get_member_balances() -> list[dict]:
    """Per-member savings, largest balance first. Entries without a member name are skipped."""
    members: dict[str, dict] = {}
    for tx in _member_transactions().order_by(Transaction.created_at).all():
        name = member_name_from_description(tx.description)
        if name is None:
            continue
        entry = members.setdefault(name, {
            "member_name": name,
            "total_deposit": 0,
            "total_withdrawal": 0,
            "balance": 0,
            "transaction_count": 0,
            "last_transaction_at": None,
        })
        if tx.category == TransactionCategory.MEMBER_DEPOSIT:
            entry["total_deposit"] += tx.amount
        else:
            entry["total_withdrawal"] += tx.amount
        entry["balance"] = entry["total_deposit"] - entry["total_withdrawal"]
        entry["transaction_count"] += 1
        entry["last_transaction_at"] = tx.created_at
    return sorted(members.values(), key=lambda m: (-m["balance"], m["member_name"]))
