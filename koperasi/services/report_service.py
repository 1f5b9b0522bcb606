# Overview: Service-layer operations for reporting; read-only aggregates for dashboards and reports.

from __future__ import annotations

from datetime import datetime, tzinfo

from sqlalchemy import func

from ..constants import OrderStatus, TransactionCategory, TransactionType
from ..extensions import db
from ..formatting import format_currency, format_relative_time, get_period_label
from ..models import ActivityLog, Order, Transaction, User
from ..permissions import get_allowed_routes, get_role_display_name
from ..time_utils import to_utc_z, utcnow
from . import ledger_rules
from .financial_service import get_balance
from .inventory_service import get_inventory_stats, get_low_stock_alerts
from .ledger_rules import PeriodRange


def _sum_and_count(*criteria) -> tuple[int, int]:
    total, count = db.session.query(
        func.coalesce(func.sum(Transaction.amount), 0), func.count(Transaction.id)
    ).filter(Transaction.deleted_at.is_(None), *criteria).one()
    return int(total), int(count)


def get_dashboard_report(period: PeriodRange) -> dict:
    """Financial, sales, inventory and member figures for one period."""
    in_period = (Transaction.created_at >= period.start, Transaction.created_at < period.end)

    cash_in, _ = _sum_and_count(Transaction.type == TransactionType.CASH_IN, *in_period)
    cash_out, _ = _sum_and_count(Transaction.type == TransactionType.CASH_OUT, *in_period)
    _, tx_count = _sum_and_count(*in_period)

    deposits, deposit_count = _sum_and_count(Transaction.category == TransactionCategory.MEMBER_DEPOSIT, *in_period)
    withdrawals, withdrawal_count = _sum_and_count(
        Transaction.category == TransactionCategory.MEMBER_WITHDRAWAL, *in_period
    )

    orders_in_period = (Order.created_at >= period.start, Order.created_at < period.end)
    order_count = db.session.query(func.count(Order.id)).filter(*orders_in_period).scalar() or 0
    completed, revenue = db.session.query(
        func.count(Order.id), func.coalesce(func.sum(Order.total), 0)
    ).filter(Order.status == OrderStatus.COMPLETED, *orders_in_period).one()
    revenue = int(revenue)

    inventory = get_inventory_stats()

    return {
        **period.to_dict(),
        "label": get_period_label(period.period),
        "financial": {
            "cash_in": cash_in,
            "cash_out": cash_out,
            "balance": cash_in - cash_out,
            "transactions": tx_count,
        },
        "sales": {
            "orders": order_count,
            "completed_orders": completed,
            "revenue": revenue,
            "average_order_value": round(revenue / completed) if completed else 0,
        },
        "inventory": {
            "total_products": inventory["total_products"],
            "low_stock_count": inventory["low_stock_products"],
            "total_stock_value": inventory["inventory_value"],
        },
        "member": {
            "deposits": deposits,
            "withdrawals": withdrawals,
            "balance": deposits - withdrawals,
            "transactions": deposit_count + withdrawal_count,
        },
    }


def _cash_flow(start: datetime, end: datetime) -> dict:
    transactions = (
        db.session.query(Transaction)
        .filter(Transaction.deleted_at.is_(None), Transaction.created_at >= start, Transaction.created_at < end)
        .all()
    )
    return ledger_rules.summarize(transactions)


def get_dashboard_overview(user: User, *, now: datetime | None = None, tz: tzinfo) -> dict:
    """Landing-page data: today vs yesterday, balances, alerts and recent activity."""
    now = now or utcnow()
    today = ledger_rules.get_period_range("today", now=now, tz=tz)
    yesterday_start = today.start - (today.end - today.start)
    yesterday = _cash_flow(yesterday_start, today.start)
    current = _cash_flow(today.start, today.end)

    sales_today = db.session.query(
        func.count(Order.id), func.coalesce(func.sum(Order.total), 0)
    ).filter(
        Order.status == OrderStatus.COMPLETED, Order.created_at >= today.start, Order.created_at < today.end
    ).one()

    low_stock = len(get_low_stock_alerts())
    balance = get_balance()

    recent = (
        db.session.query(ActivityLog)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(5)
        .all()
    )

    return {
        "user": {
            "id": user.id,
            "full_name": user.full_name,
            "role": user.role,
            "role_display_name": get_role_display_name(user.role),
        },
        "allowed_routes": get_allowed_routes(user.role),
        "balance": balance,
        "balance_formatted": format_currency(balance),
        "today": {
            **current,
            "orders": int(sales_today[0]),
            "revenue": int(sales_today[1]),
            "cash_in_change": ledger_rules.calculate_percentage_change(current["cash_in"], yesterday["cash_in"]),
            "cash_out_change": ledger_rules.calculate_percentage_change(current["cash_out"], yesterday["cash_out"]),
        },
        "low_stock_count": low_stock,
        "recent_activity": [
            {
                **entry.to_dict(),
                "relative_time": format_relative_time(entry.created_at, now=now, tz=tz),
            }
            for entry in recent
        ],
        "generated_at": to_utc_z(now),
    }
