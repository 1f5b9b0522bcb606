from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Transaction(db.Model):
    """
    Cash-flow ledger entry (not a database transaction).

    amount is always positive; its effect on the balance comes from `type`.
    Deleted entries keep their row with deleted_at set and are excluded from
    every balance, listing and chart.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        db.Index("ix_transactions_created_deleted", "created_at", "deleted_at"),
        db.Index("ix_transactions_category", "category"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    type = db.Column(db.String(16), nullable=False, index=True)
    category = db.Column(db.String(32), nullable=False)
    amount = db.Column(db.BigInteger, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)

    description = db.Column(db.String(255), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)
    # Order id for POS sales
    reference_id = db.Column(db.Integer, nullable=True, index=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    supplier = db.relationship("Supplier")
    created_by = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "category": self.category,
            "amount": self.amount,
            "payment_method": self.payment_method,
            "description": self.description,
            "notes": self.notes,
            "supplier_id": self.supplier_id,
            "supplier": self.supplier.business_name if self.supplier else None,
            "reference_id": self.reference_id,
            "created_by_id": self.created_by_id,
            "created_by_name": self.created_by.full_name if self.created_by else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }
