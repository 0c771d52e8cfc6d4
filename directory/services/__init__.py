from .customer_service import CustomerService
from .tenant_service import TenantResolver, ResolvedTenant, normalize_phone


__all__ = [
    "CustomerService",
    "TenantResolver",
    "ResolvedTenant",
    "normalize_phone",
]
