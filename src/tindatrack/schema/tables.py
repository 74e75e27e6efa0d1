"""Table definitions for the TindaTrack store.

Declares every domain table with SQLAlchemy Core so the SQLite store can
create them and so the backup engine knows the fixed table set and its
foreign-key order.  The ``backup`` table holds the audit log and is kept
out of the domain set.

Usage:
    from tindatrack.schema.tables import DOMAIN_TABLES, SCHEMA_VERSION, metadata

    for name in DOMAIN_TABLES:          # parents before children
        table = metadata.tables[name]
"""

from sqlalchemy import (
    Column,
    Float,
    ForeignKey,
    Integer,
    MetaData,
    Table,
    Text,
    text,
)

# Bump when any table or column below changes.  Restores only accept
# documents stamped with the same version.
SCHEMA_VERSION = 1

AUDIT_TABLE = "backup"

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("username", Text, unique=True),
    Column("password_hash", Text),
    Column("role", Text),
    Column("full_name", Text),
    Column("store_name", Text),
)

suppliers = Table(
    "suppliers",
    metadata,
    Column("supplier_id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text),
    Column("contact_info", Text),
    Column("address", Text),
)

categories = Table(
    "categories",
    metadata,
    Column("category_id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, unique=True),
)

products = Table(
    "products",
    metadata,
    Column("product_id", Integer, primary_key=True, autoincrement=True),
    Column("sku", Text, unique=True),
    Column("name", Text),
    Column("description", Text),
    Column("unit_price", Float),
    Column("supplier_id", Integer, ForeignKey("suppliers.supplier_id")),
    Column("base_unit", Text),
    Column("category_id", Integer, ForeignKey("categories.category_id")),
)

product_units = Table(
    "product_units",
    metadata,
    Column("unit_id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.product_id")),
    Column("unit_name", Text),
    Column("conversion_factor", Float),
    Column("price_per_unit", Float),
)

inventory = Table(
    "inventory",
    metadata,
    Column("inventory_id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.product_id"), unique=True),
    Column("supplier_id", Integer, ForeignKey("suppliers.supplier_id")),
    Column("quantity", Float, server_default=text("0")),
    Column("expiration_date", Text),
    Column("threshold", Float, server_default=text("5")),
)

resupplied_items = Table(
    "resupplied_items",
    metadata,
    Column("resupplied_items_id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.product_id")),
    Column("user_id", Integer, ForeignKey("users.user_id")),
    Column("supplier_id", Integer, ForeignKey("suppliers.supplier_id")),
    Column("quantity", Float),
    Column("unit_cost", Float),
    Column("resupply_date", Text, server_default=text("CURRENT_TIMESTAMP")),
    Column("expiration_date", Text),
)

sales = Table(
    "sales",
    metadata,
    Column("sales_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.user_id")),
    Column("sales_date", Text, server_default=text("CURRENT_TIMESTAMP")),
)

sale_items = Table(
    "sale_items",
    metadata,
    Column("sales_items_id", Integer, primary_key=True, autoincrement=True),
    Column("sales_id", Integer, ForeignKey("sales.sales_id")),
    Column("product_id", Integer, ForeignKey("products.product_id")),
    Column("quantity", Float),
    Column("amount", Float),
    Column("total_amount", Float),
    Column("stockout_reason", Text),
)

stock_card = Table(
    "stock_card",
    metadata,
    Column("stock_card_id", Integer, primary_key=True, autoincrement=True),
    Column("product_id", Integer, ForeignKey("products.product_id")),
    Column("supplier_id", Integer, ForeignKey("suppliers.supplier_id")),
    Column("user_id", Integer, ForeignKey("users.user_id")),
    Column("quantity", Float),
    Column("unit_cost", Float),
    Column("unit_price", Float),
    Column("resupply_date", Text),
    Column("expiration_date", Text),
    Column("sales_id", Integer, ForeignKey("sales.sales_id")),
    Column("sale_items_id", Integer, ForeignKey("sale_items.sales_items_id")),
    Column("transaction_type", Text),
    Column("running_balance", Float),
    Column("timestamp", Text, server_default=text("CURRENT_TIMESTAMP")),
)

# Audit log.  Never cleared or restored by the backup engine.
backup = Table(
    AUDIT_TABLE,
    metadata,
    Column("backup_id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Text),
    Column("username", Text),
    Column("backup_name", Text),
    Column("backup_type", Text),
    Column("created_at", Text),
    Column("schema_version", Integer),
    Column("file_name", Text),
    Column("file_size", Integer),
    Column("checksum", Text),
    Column("details", Text),
)

# Dependency-safe order: every table comes after the tables it references.
DOMAIN_TABLES: tuple[str, ...] = (
    "users",
    "suppliers",
    "categories",
    "products",
    "product_units",
    "inventory",
    "resupplied_items",
    "sales",
    "sale_items",
    "stock_card",
)

PRIMARY_KEYS: dict[str, str] = {
    name: list(metadata.tables[name].primary_key.columns)[0].name
    for name in (*DOMAIN_TABLES, AUDIT_TABLE)
}


def expected_columns() -> dict[str, set[str]]:
    """Column names per table, in the shape ``validate_schema`` expects."""
    return {
        name: {c.name for c in table.columns}
        for name, table in metadata.tables.items()
    }
