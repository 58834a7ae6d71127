from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional

from smartstock.domain.errors import ValidationError


class ItemKind(str, Enum):
    RAW_MATERIAL = "raw_material"
    PRODUCT = "product"

    @property
    def label(self) -> str:
        return "Raw Material" if self is ItemKind.RAW_MATERIAL else "Product"


class Role(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


def _amount_matches(total: float, qty: int, unit: float) -> bool:
    return math.isclose(float(total), qty * float(unit), rel_tol=1e-9, abs_tol=1e-9)


@dataclass(frozen=True)
class RawMaterial:
    id: str
    name: str
    unit: str
    price: float
    stock: int
    min_threshold: int
    created_at: str
    updated_at: str
    kind: ItemKind = field(default=ItemKind.RAW_MATERIAL, init=False)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_threshold

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "price": self.price,
            "stock": self.stock,
            "minThreshold": self.min_threshold,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawMaterial":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            unit=str(data.get("unit", "")),
            price=float(data.get("price", 0)),
            stock=int(data.get("stock", 0)),
            min_threshold=int(data.get("minThreshold", 0)),
            created_at=str(data.get("createdAt", "")),
            updated_at=str(data.get("updatedAt", "")),
        )


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    unit: str
    cost: float
    selling_price: float
    stock: int
    min_threshold: int
    created_at: str
    updated_at: str
    kind: ItemKind = field(default=ItemKind.PRODUCT, init=False)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_threshold

    @property
    def unit_profit(self) -> float:
        return self.selling_price - self.cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "cost": self.cost,
            "sellingPrice": self.selling_price,
            "stock": self.stock,
            "minThreshold": self.min_threshold,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Product":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            unit=str(data.get("unit", "")),
            cost=float(data.get("cost", 0)),
            selling_price=float(data.get("sellingPrice", 0)),
            stock=int(data.get("stock", 0)),
            min_threshold=int(data.get("minThreshold", 0)),
            created_at=str(data.get("createdAt", "")),
            updated_at=str(data.get("updatedAt", "")),
        )


StockItem = RawMaterial | Product


@dataclass(frozen=True)
class Sale:
    id: str
    customer_name: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    total_amount: float
    date: str
    created_at: str

    search_fields: ClassVar[tuple[str, ...]] = ("customer_name", "product_name")

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError("Sale quantity must be > 0.")
        if not _amount_matches(self.total_amount, self.quantity, self.unit_price):
            raise ValidationError(
                f"Sale total {self.total_amount} does not match {self.quantity} x {self.unit_price}."
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "productId": self.product_id,
            "productName": self.product_name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalAmount": self.total_amount,
            "date": self.date,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Sale":
        return cls(
            id=str(data["id"]),
            customer_name=str(data.get("customerName", "")),
            product_id=str(data.get("productId", "")),
            product_name=str(data.get("productName", "")),
            quantity=int(data["quantity"]),
            unit_price=float(data["unitPrice"]),
            total_amount=float(data["totalAmount"]),
            date=str(data["date"]),
            created_at=str(data.get("createdAt", "")),
        )


@dataclass(frozen=True)
class Purchase:
    id: str
    supplier_name: str
    product_id: str
    product_name: str
    is_raw_material: bool
    quantity: int
    unit_cost: float
    total_cost: float
    date: str
    created_at: str

    search_fields: ClassVar[tuple[str, ...]] = ("supplier_name", "product_name")

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValidationError("Purchase quantity must be > 0.")
        if self.unit_cost < 0:
            raise ValidationError("Unit cost must be >= 0.")
        if not _amount_matches(self.total_cost, self.quantity, self.unit_cost):
            raise ValidationError(
                f"Purchase total {self.total_cost} does not match {self.quantity} x {self.unit_cost}."
            )

    @property
    def target_kind(self) -> ItemKind:
        return ItemKind.RAW_MATERIAL if self.is_raw_material else ItemKind.PRODUCT

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "supplierName": self.supplier_name,
            "productId": self.product_id,
            "productName": self.product_name,
            "isRawMaterial": self.is_raw_material,
            "quantity": self.quantity,
            "unitCost": self.unit_cost,
            "totalCost": self.total_cost,
            "date": self.date,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Purchase":
        return cls(
            id=str(data["id"]),
            supplier_name=str(data.get("supplierName", "")),
            product_id=str(data.get("productId", "")),
            product_name=str(data.get("productName", "")),
            is_raw_material=bool(data.get("isRawMaterial", False)),
            quantity=int(data["quantity"]),
            unit_cost=float(data["unitCost"]),
            total_cost=float(data["totalCost"]),
            date=str(data["date"]),
            created_at=str(data.get("createdAt", "")),
        )


@dataclass(frozen=True)
class User:
    id: str
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "role": self.role.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        return cls(id=str(data["id"]), username=str(data["username"]), role=Role(data["role"]))


@dataclass(frozen=True)
class DashboardStats:
    total_products: int
    total_raw_materials: int
    low_stock_items: int
    today_sales: float
    today_purchases: float
    total_revenue: float
    total_costs: float
    profit: float


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str

    def contains(self, iso_date: str) -> bool:
        return self.start <= iso_date <= self.end


@dataclass(frozen=True)
class ReportSummary:
    total_sales: float
    total_purchases: float
    profit: float
    profit_margin: float
    sales_count: int
    purchases_count: int
    top_products: list[tuple[str, float]]
    top_suppliers: list[tuple[str, float]]


@dataclass(frozen=True)
class StockReport:
    low_stock_products: list[Product]
    low_stock_materials: list[RawMaterial]
    low_stock_items: list[StockItem]


@dataclass(frozen=True)
class RepositorySnapshot:
    raw_materials: tuple[RawMaterial, ...]
    products: tuple[Product, ...]
    sales: tuple[Sale, ...]
    purchases: tuple[Purchase, ...]


def parse_quantity(value: Any) -> int:
    """Whole, positive quantity from user input; fractions are rejected, not truncated."""
    if isinstance(value, bool):
        raise ValidationError(f"Qty must be a whole number, got {value!r}.")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Qty must be a whole number, got {value!r}.") from None
    if not number.is_integer():
        raise ValidationError(f"Qty must be a whole number, got {value!r}.")
    if number <= 0:
        raise ValidationError("Qty must be >= 1.")
    return int(number)


def find_by_id(items, item_id: str) -> Optional[Any]:
    for item in items:
        if item.id == item_id:
            return item
    return None
