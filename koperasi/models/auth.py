from __future__ import annotations

from ..extensions import db
from ..constants import Role
from ..time_utils import to_utc_z, utcnow


class User(db.Model):
    """
    User accounts for authentication and attribution.

    Users are never hard-deleted: deactivation flips is_active so historic
    orders, transactions and activity logs keep their author.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint(
            "role IN ('DEVELOPER', 'SUPER_ADMIN', 'ADMIN', 'KASIR', 'STAFF', 'SUPPLIER')",
            name="ck_users_role",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(64), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=True, unique=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    full_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    role = db.Column(db.String(16), nullable=False, default=Role.STAFF, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "full_name": self.full_name,
            "phone": self.phone,
            "role": self.role,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "last_login_at": to_utc_z(self.last_login_at),
        }
