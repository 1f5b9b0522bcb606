from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = (
        db.Index("uq_categories_name_live", "name", unique=True, sqlite_where=db.text("deleted_at IS NULL"),
                 postgresql_where=db.text("deleted_at IS NULL")),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }


class Supplier(db.Model):
    """
    Supplier master data.

    business_name is unique among non-deleted suppliers. A supplier cannot be
    deleted while any non-deleted product still references it.
    """
    __tablename__ = "suppliers"
    __table_args__ = (
        db.Index("uq_suppliers_business_name_live", "business_name", unique=True,
                 sqlite_where=db.text("deleted_at IS NULL"), postgresql_where=db.text("deleted_at IS NULL")),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    business_name = db.Column(db.String(255), nullable=False)
    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self, product_count: int | None = None) -> dict:
        data = {
            "id": self.id,
            "business_name": self.business_name,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if product_count is not None:
            data["product_count"] = product_count
        return data


class Product(db.Model):
    """
    Product master data.

    STOCK: `stock` is only changed through stock movements and POS order
    completion/cancellation, never by a product edit. The check constraint
    keeps it non-negative and version_id turns concurrent decrements of the
    same row into a StaleDataError instead of a lost update.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.CheckConstraint("purchase_price >= 0 AND selling_price >= 0", name="ck_products_prices_non_negative"),
        db.Index("uq_products_sku_live", "sku", unique=True, sqlite_where=db.text("deleted_at IS NULL"),
                 postgresql_where=db.text("deleted_at IS NULL")),
        db.Index("ix_products_name", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    sku = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)

    # Whole rupiah
    purchase_price = db.Column(db.BigInteger, nullable=False, default=0)
    selling_price = db.Column(db.BigInteger, nullable=False, default=0)

    stock = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))
    supplier = db.relationship("Supplier", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sku": self.sku,
            "name": self.name,
            "description": self.description,
            "category_id": self.category_id,
            "category": self.category.name if self.category else None,
            "supplier_id": self.supplier_id,
            "supplier": self.supplier.business_name if self.supplier else None,
            "purchase_price": self.purchase_price,
            "selling_price": self.selling_price,
            "stock": self.stock,
            "min_stock": self.min_stock,
            "is_low_stock": self.is_low_stock,
            "is_active": self.is_active,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class StockMovement(db.Model):
    """
    Append-only audit of every stock change.

    quantity is signed (IN > 0, OUT < 0, ADJUSTMENT != 0); summing it per
    product reproduces the stock history.
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.CheckConstraint("quantity != 0", name="ck_stock_movements_quantity_nonzero"),
        db.Index("ix_stock_movements_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    type = db.Column(db.String(16), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    stock_before = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)

    notes = db.Column(db.String(255), nullable=True)
    # Order id for POS-driven movements
    reference_id = db.Column(db.Integer, nullable=True, index=True)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)

    product = db.relationship("Product", backref=db.backref("stock_movements", lazy="dynamic"))
    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "product_sku": self.product.sku if self.product else None,
            "type": self.type,
            "quantity": self.quantity,
            "stock_before": self.stock_before,
            "stock_after": self.stock_after,
            "notes": self.notes,
            "reference_id": self.reference_id,
            "created_by": self.created_by,
            "created_by_name": self.user.full_name if self.user else None,
            "created_at": to_utc_z(self.created_at),
        }
