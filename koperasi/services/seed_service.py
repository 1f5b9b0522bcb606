# Overview: Service-layer operations for demo data; seeds accounts, catalog and sample ledger entries.

"""
Demo dataset for a fresh koperasi database.

Safe to rerun: every record is looked up by its natural key (username, name,
SKU, description) and skipped when it already exists.
"""

from __future__ import annotations

from ..constants import (
    PaymentMethod,
    Role,
    StockMovementType,
    TransactionCategory,
    TransactionType,
)
from ..extensions import db
from ..models import Category, Product, Supplier, Transaction, User
from .auth_service import hash_password
from .inventory_service import apply_stock_change

DEFAULT_PASSWORD = "password123"

USERS_SEED = [
    ("developer", "developer@umbandung.com", "Developer Account", "08123456789", Role.DEVELOPER),
    ("superadmin", "superadmin@umbandung.com", "Super Administrator", "08123456790", Role.SUPER_ADMIN),
    ("admin", "admin@umbandung.com", "Administrator", "08123456791", Role.ADMIN),
    ("kasir", "kasir@umbandung.com", "Kasir Toko", "08123456792", Role.KASIR),
]

CATEGORIES_SEED = [
    ("Makanan", "Produk makanan"),
    ("Minuman", "Produk minuman"),
    ("Alat Tulis", "Perlengkapan sekolah"),
    ("Elektronik", "Barang elektronik"),
]

SUPPLIERS_SEED = [
    ("PT Sumber Rezeki", "Budi Santoso", "0221234567", "sumberrezeki@email.com", "Jl. Raya Bandung No. 123"),
    ("CV Jaya Abadi", "Siti Rahayu", "0221234568", "jayaabadi@email.com", "Jl. Soekarno Hatta No. 456"),
]

# sku, name, description, category, supplier, purchase, selling, stock, min_stock
PRODUCTS_SEED = [
    ("MKN001", "Indomie Goreng", "Mie instan rasa goreng", "Makanan", "PT Sumber Rezeki", 2500, 3500, 100, 20),
    ("MKN002", "Biskuit Roma", "Biskuit kelapa", "Makanan", "PT Sumber Rezeki", 3000, 4000, 75, 15),
    ("MNM001", "Teh Botol Sosro", "Teh dalam kemasan botol", "Minuman", "PT Sumber Rezeki", 3500, 5000, 120, 30),
    ("MNM002", "Aqua 600ml", "Air mineral dalam kemasan", "Minuman", "CV Jaya Abadi", 2000, 3000, 200, 50),
    ("ATS001", "Pulpen Standard AE", "Pulpen tinta biru/hitam", "Alat Tulis", "CV Jaya Abadi", 1500, 2500, 150, 40),
    ("ATS002", "Buku Tulis 38 Lembar", "Buku tulis sinar dunia", "Alat Tulis", "CV Jaya Abadi", 3500, 5000, 80, 20),
]

# type, category, amount, method, description, notes, supplier, created by
TRANSACTIONS_SEED = [
    (TransactionType.CASH_IN, TransactionCategory.SALES, 150000, PaymentMethod.CASH,
     "Penjualan ATK ke pelanggan", "Penjualan tunai di toko", None, "kasir"),
    (TransactionType.CASH_OUT, TransactionCategory.PURCHASE, 75000, PaymentMethod.CASH,
     "Pembelian alat tulis dari supplier", "Restok barang", "PT Sumber Rezeki", "admin"),
    (TransactionType.CASH_IN, TransactionCategory.SALES, 50000, PaymentMethod.BANK_TRANSFER,
     "Penjualan pulpen", "Transfer dari Bu Siti", None, "kasir"),
    (TransactionType.CASH_OUT, TransactionCategory.OPERATIONAL, 25000, PaymentMethod.CASH,
     "Biaya listrik toko", "Bulan Oktober 2025", None, "admin"),
    (TransactionType.CASH_IN, TransactionCategory.MEMBER_DEPOSIT, 100000, PaymentMethod.CASH,
     "Simpanan pokok anggota", "Anggota baru: Pak Ahmad", None, "kasir"),
]


def seed_database(password: str = DEFAULT_PASSWORD) -> dict[str, int]:
    """Create the demo dataset. Returns how many records of each kind were created."""
    created_counts = {"users": 0, "categories": 0, "suppliers": 0, "products": 0, "transactions": 0}

    users = {}
    password_hash = None
    for username, email, full_name, phone, role in USERS_SEED:
        user = db.session.query(User).filter_by(username=username).first()
        if not user:
            # Seeded accounts share one hash
            password_hash = password_hash or hash_password(password)
            user = User(
                username=username,
                email=email,
                password_hash=password_hash,
                full_name=full_name,
                phone=phone,
                role=role,
                is_active=True,
            )
            db.session.add(user)
            created_counts["users"] += 1
        users[username] = user
    db.session.flush()

    categories = {}
    for name, description in CATEGORIES_SEED:
        category = db.session.query(Category).filter(Category.name == name, Category.deleted_at.is_(None)).first()
        if not category:
            category = Category(name=name, description=description)
            db.session.add(category)
            created_counts["categories"] += 1
        categories[name] = category

    suppliers = {}
    for business_name, contact, phone, email, address in SUPPLIERS_SEED:
        supplier = (
            db.session.query(Supplier)
            .filter(Supplier.business_name == business_name, Supplier.deleted_at.is_(None))
            .first()
        )
        if not supplier:
            supplier = Supplier(
                business_name=business_name,
                contact_person=contact,
                phone=phone,
                email=email,
                address=address,
            )
            db.session.add(supplier)
            created_counts["suppliers"] += 1
        suppliers[business_name] = supplier
    db.session.flush()

    admin = users["admin"]
    for sku, name, description, category, supplier, purchase, selling, stock, min_stock in PRODUCTS_SEED:
        exists = db.session.query(Product.id).filter(Product.sku == sku, Product.deleted_at.is_(None)).first()
        if exists:
            continue
        product = Product(
            sku=sku,
            name=name,
            description=description,
            category_id=categories[category].id,
            supplier_id=suppliers[supplier].id,
            purchase_price=purchase,
            selling_price=selling,
            stock=0,
            min_stock=min_stock,
        )
        db.session.add(product)
        db.session.flush()
        apply_stock_change(
            product,
            delta=stock,
            movement_type=StockMovementType.IN,
            actor_id=admin.id,
            notes="Initial stock",
        )
        created_counts["products"] += 1

    for tx_type, category, amount, method, description, notes, supplier, username in TRANSACTIONS_SEED:
        exists = db.session.query(Transaction.id).filter(Transaction.description == description).first()
        if exists:
            continue
        db.session.add(
            Transaction(
                type=tx_type,
                category=category,
                amount=amount,
                payment_method=method,
                description=description,
                notes=notes,
                supplier_id=suppliers[supplier].id if supplier else None,
                created_by_id=users[username].id,
            )
        )
        created_counts["transactions"] += 1

    db.session.commit()
    return created_counts
