# Overview: Locking helpers for stock-changing operations.

from __future__ import annotations

from sqlalchemy import text

from ..extensions import db


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; begin_write_transaction covers it there.
    """
    return query.with_for_update()


def begin_write_transaction() -> None:
    """
    On SQLite, take the database write lock up front (BEGIN IMMEDIATE) so two
    checkouts cannot both read the same stock level before either writes.

    No-op on other engines, and when the connection already holds an open
    transaction.
    """
    if db.engine.dialect.name != "sqlite":
        return
    raw = db.session.connection().connection
    if getattr(raw, "in_transaction", False):
        return
    db.session.execute(text("BEGIN IMMEDIATE"))
