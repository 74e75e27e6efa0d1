"""Shared fixtures: a small, foreign-key-consistent store data set."""

import pytest


def _seed_rows() -> dict[str, list[dict]]:
    return {
        "users": [
            {
                "user_id": 1,
                "username": "alice",
                "password_hash": "5e884898da28047151d0e56f8dc6292773603d0d",
                "role": "Owner",
                "full_name": "Alice Santos",
                "store_name": "Aling Nena Sari-Sari",
            },
            {
                "user_id": 2,
                "username": "ben",
                "password_hash": "a94a8fe5ccb19ba61c4c0873d391e987982fbbd3",
                "role": "Staff",
                "full_name": "Ben Cruz",
                "store_name": "Aling Nena Sari-Sari",
            },
        ],
        "suppliers": [
            {"supplier_id": 1, "name": "Coca-Cola PH", "contact_info": "0917 555 0101", "address": "Quezon City"},
            {"supplier_id": 2, "name": "Jack 'n Jill", "contact_info": "0918 555 0202", "address": "Pasig"},
        ],
        "categories": [
            {"category_id": 1, "name": "Beverages"},
            {"category_id": 2, "name": "Snacks"},
        ],
        "products": [
            {
                "product_id": 1,
                "sku": "BEV-001",
                "name": "Coke",
                "description": "Coke 330ml can",
                "unit_price": 25.0,
                "supplier_id": 1,
                "base_unit": "can",
                "category_id": 1,
            },
            {
                "product_id": 2,
                "sku": "SNK-001",
                "name": "Chips",
                "description": "Potato chips 60g",
                "unit_price": 50.0,
                "supplier_id": 2,
                "base_unit": "pack",
                "category_id": 2,
            },
        ],
        "product_units": [
            {"unit_id": 1, "product_id": 1, "unit_name": "case", "conversion_factor": 24.0, "price_per_unit": 560.0},
        ],
        "inventory": [
            {"inventory_id": 1, "product_id": 1, "supplier_id": 1, "quantity": 48.0, "expiration_date": "2027-03-01", "threshold": 12.0},
            {"inventory_id": 2, "product_id": 2, "supplier_id": 2, "quantity": 9.0, "expiration_date": None, "threshold": 5.0},
        ],
        "resupplied_items": [
            {
                "resupplied_items_id": 1,
                "product_id": 1,
                "user_id": 1,
                "supplier_id": 1,
                "quantity": 48.0,
                "unit_cost": 20.0,
                "resupply_date": "2026-01-02 08:00:00",
                "expiration_date": "2027-03-01",
            },
        ],
        "sales": [
            {"sales_id": 1, "user_id": 2, "sales_date": "2026-01-02 10:15:00"},
        ],
        "sale_items": [
            {
                "sales_items_id": 1,
                "sales_id": 1,
                "product_id": 2,
                "quantity": 1.0,
                "amount": 50.0,
                "total_amount": 50.0,
                "stockout_reason": None,
            },
        ],
        "stock_card": [
            {
                "stock_card_id": 1,
                "product_id": 2,
                "supplier_id": 2,
                "user_id": 2,
                "quantity": -1.0,
                "unit_cost": 38.0,
                "unit_price": 50.0,
                "resupply_date": None,
                "expiration_date": None,
                "sales_id": 1,
                "sale_items_id": 1,
                "transaction_type": "SALE",
                "running_balance": 9.0,
                "timestamp": "2026-01-02 10:15:00",
            },
        ],
    }


@pytest.fixture
def seed_rows() -> dict[str, list[dict]]:
    """One row or more in every domain table, foreign keys satisfied."""
    return _seed_rows()


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'tindatrack.db'}"
