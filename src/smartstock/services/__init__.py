from .auth_service import AuthService
from .inventory_service import DeleteOutcome, InventoryService
from .sales_service import SalesService
from .purchase_service import PurchaseService
from .reporting_service import ReportingService, ReportPeriod
from .export_service import ExportService

__all__ = [
    "AuthService",
    "DeleteOutcome",
    "InventoryService",
    "SalesService",
    "PurchaseService",
    "ReportingService",
    "ReportPeriod",
    "ExportService",
]
