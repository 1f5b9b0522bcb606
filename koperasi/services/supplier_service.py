# Overview: Service-layer operations for suppliers; encapsulates business logic and database work.

"""
Supplier Service

business_name is unique among non-deleted suppliers. Deleting is a soft
delete and is refused while any non-deleted product still points at the
supplier, so product rows never reference a deleted supplier.
"""

from __future__ import annotations

from sqlalchemy import func, or_

from ..constants import ActivityAction, ActivityModule
from ..errors import ConflictError, NotFound, ReferentialIntegrityViolation
from ..extensions import db
from ..models import Product, Supplier, User
from ..permissions import Capability
from ..time_utils import utcnow
from .activity_service import log_activity
from .permission_service import require_capability


def _live_suppliers():
    return db.session.query(Supplier).filter(Supplier.deleted_at.is_(None))


def _product_count_subquery():
    return (
        db.session.query(Product.supplier_id, func.count(Product.id).label("product_count"))
        .filter(Product.deleted_at.is_(None))
        .group_by(Product.supplier_id)
        .subquery()
    )


def count_products(supplier_id: int) -> int:
    return (
        db.session.query(func.count(Product.id))
        .filter(Product.supplier_id == supplier_id, Product.deleted_at.is_(None))
        .scalar() or 0
    )


def get_supplier(supplier_id: int) -> Supplier:
    supplier = _live_suppliers().filter(Supplier.id == supplier_id).first()
    if supplier is None:
        raise NotFound("Supplier not found")
    return supplier


def list_suppliers(
    *,
    search: str | None = None,
    is_active: bool | None = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[tuple[Supplier, int]], int]:
    """Suppliers with their live product counts, newest first."""
    counts = _product_count_subquery()
    query = (
        db.session.query(Supplier, func.coalesce(counts.c.product_count, 0))
        .outerjoin(counts, counts.c.supplier_id == Supplier.id)
        .filter(Supplier.deleted_at.is_(None))
    )
    if search:
        like = f"%{search}%"
        query = query.filter(or_(
            Supplier.business_name.ilike(like),
            Supplier.contact_person.ilike(like),
            Supplier.phone.ilike(like),
            Supplier.email.ilike(like),
        ))
    if is_active is not None:
        query = query.filter(Supplier.is_active.is_(is_active))

    total = query.count()
    rows = query.order_by(Supplier.created_at.desc(), Supplier.id.desc()).offset(offset).limit(limit).all()
    return [(supplier, int(count)) for supplier, count in rows], total


def _ensure_name_free(business_name: str, exclude_id: int | None = None) -> None:
    query = _live_suppliers().filter(func.lower(Supplier.business_name) == business_name.lower())
    if exclude_id:
        query = query.filter(Supplier.id != exclude_id)
    if query.first():
        raise ConflictError("Supplier with this business name already exists", details={"field": "business_name"})


def create_supplier(*, actor: User, **data) -> Supplier:
    require_capability(actor, Capability.MANAGE_SUPPLIERS, resource="suppliers.create")
    _ensure_name_free(data["business_name"])
    supplier = Supplier(**data)
    db.session.add(supplier)
    log_activity(
        user=actor,
        module=ActivityModule.SUPPLIER,
        action=ActivityAction.CREATE,
        description=f"Created supplier {supplier.business_name}",
    )
    db.session.commit()
    return supplier


def update_supplier(supplier_id: int, *, actor: User, **changes) -> Supplier:
    require_capability(actor, Capability.MANAGE_SUPPLIERS, resource="suppliers.update")
    supplier = get_supplier(supplier_id)
    new_name = changes.get("business_name")
    if new_name and new_name != supplier.business_name:
        _ensure_name_free(new_name, exclude_id=supplier.id)
    for field, value in changes.items():
        setattr(supplier, field, value)
    log_activity(
        user=actor,
        module=ActivityModule.SUPPLIER,
        action=ActivityAction.UPDATE,
        description=f"Updated supplier {supplier.business_name}",
    )
    db.session.commit()
    return supplier


def delete_supplier(supplier_id: int, *, actor: User) -> None:
    require_capability(actor, Capability.MANAGE_SUPPLIERS, resource="suppliers.delete")
    supplier = get_supplier(supplier_id)
    product_count = count_products(supplier.id)
    if product_count > 0:
        raise ReferentialIntegrityViolation(
            "Cannot delete supplier with existing products. Please reassign or delete products first.",
            details={"product_count": product_count},
        )
    supplier.deleted_at = utcnow()
    log_activity(
        user=actor,
        module=ActivityModule.SUPPLIER,
        action=ActivityAction.DELETE,
        description=f"Deleted supplier {supplier.business_name}",
    )
    db.session.commit()


def get_supplier_stats() -> dict:
    total_suppliers = db.session.query(func.count(Supplier.id)).filter(Supplier.deleted_at.is_(None)).scalar() or 0
    active_suppliers = (
        db.session.query(func.count(Supplier.id))
        .filter(Supplier.deleted_at.is_(None), Supplier.is_active.is_(True))
        .scalar() or 0
    )
    total_products = db.session.query(func.count(Product.id)).filter(Product.deleted_at.is_(None)).scalar() or 0

    counts = _product_count_subquery()
    product_count = func.coalesce(counts.c.product_count, 0)
    top = (
        db.session.query(Supplier, product_count)
        .outerjoin(counts, counts.c.supplier_id == Supplier.id)
        .filter(Supplier.deleted_at.is_(None), Supplier.is_active.is_(True))
        .order_by(product_count.desc(), Supplier.business_name)
        .limit(5)
        .all()
    )
    return {
        "total_suppliers": total_suppliers,
        "active_suppliers": active_suppliers,
        "total_products": total_products,
        "top_suppliers": [
            {
                "id": s.id,
                "business_name": s.business_name,
                "contact_person": s.contact_person,
                "phone": s.phone,
                "product_count": int(c),
            }
            for s, c in top
        ],
    }
