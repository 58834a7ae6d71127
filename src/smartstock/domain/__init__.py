from .models import (
    DashboardStats,
    DateRange,
    ItemKind,
    Product,
    Purchase,
    RawMaterial,
    ReportSummary,
    Role,
    Sale,
    StockReport,
    User,
)
from .errors import (
    AuthorizationError,
    InsufficientStockError,
    NotFoundError,
    ReferenceNotFound,
    StorageError,
    ValidationError,
)

__all__ = [
    "DashboardStats",
    "DateRange",
    "ItemKind",
    "Product",
    "Purchase",
    "RawMaterial",
    "ReportSummary",
    "Role",
    "Sale",
    "StockReport",
    "User",
    "AuthorizationError",
    "InsufficientStockError",
    "NotFoundError",
    "ReferenceNotFound",
    "StorageError",
    "ValidationError",
]
