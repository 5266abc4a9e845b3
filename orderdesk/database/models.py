"""
Catalog data models
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Store:
    """Distributor store"""
    id: int | None = None
    name: str = ""
    operation_cost_percentage: Decimal = Decimal("0")
    currency: str = "INR"
    created_at: datetime | None = None


@dataclass
class Customer:
    """Recurring customer of a store"""
    id: int | None = None
    store_id: int = 0
    name: str = ""
    created_at: datetime | None = None


@dataclass
class Product:
    """Catalog product"""
    id: int | None = None
    store_id: int = 0
    name: str = ""
    base_price: Decimal = Decimal("0")
    sku: str | None = None
    created_at: datetime | None = None

    def get_display_name(self) -> str:
        """Name with SKU when present"""
        if self.sku:
            return f"{self.name} ({self.sku})"
        return self.name or f"Product #{self.id}"
