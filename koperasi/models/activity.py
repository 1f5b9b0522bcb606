from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class ActivityLog(db.Model):
    """Append-only record of who did what, written in the same DB transaction as the change."""
    __tablename__ = "activity_logs"
    __table_args__ = (
        db.Index("ix_activity_logs_module_created", "module", "created_at"),
        db.Index("ix_activity_logs_user_created", "user_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    # Role at the time of the action
    role = db.Column(db.String(16), nullable=True)
    module = db.Column(db.String(16), nullable=False)
    action = db.Column(db.String(16), nullable=False, index=True)
    description = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "username": self.user.username if self.user else None,
            "user_name": self.user.full_name if self.user else None,
            "role": self.role,
            "module": self.module,
            "action": self.action,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }
