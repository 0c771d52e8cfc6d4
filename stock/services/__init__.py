"""
Stock Services - inventory ledger and catalog business logic

Usage:
    from stock.services import InventoryLedgerService, CatalogService

    # Receive stock into a lot
    InventoryLedgerService.increment_stock(distributor_id=1, sku="AR-001", quantity=10,
                                           lot_number="L-2024-01", expiration_date="2025-03-01")

    # Consume stock FEFO
    InventoryLedgerService.decrement_stock(distributor_id=1, sku="AR-001", quantity=4)
"""

# Base utilities
from stock.services.base_service import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    InsufficientStockError,
    InvalidTransitionError,
    TenantResolutionError,
    success_response,
    error_response,
    paginate_queryset,
    to_decimal,
    to_date,
    to_datetime,
    round_money,
    generate_number,
    parse_positive_int,
    BaseService,
)

# Ledger & catalog
from .ledger_service import InventoryLedgerService
from .catalog_service import CatalogService, normalize_text


__all__ = [
    # Base
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "InsufficientStockError",
    "InvalidTransitionError",
    "TenantResolutionError",
    "success_response",
    "error_response",
    "paginate_queryset",
    "to_decimal",
    "to_date",
    "to_datetime",
    "round_money",
    "generate_number",
    "parse_positive_int",
    "BaseService",

    # Ledger & catalog
    "InventoryLedgerService",
    "CatalogService",
    "normalize_text",
]
