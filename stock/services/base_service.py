from typing import Dict, Any, Optional, List, Tuple
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import date, datetime
import secrets

from django.db.models import Model
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime


class ServiceError(Exception):
    def __init__(self, message: str, code: str = "ERROR", details: Dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ValidationError(ServiceError):
    def __init__(self, message: str, field: str = None, details: Dict = None):
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class NotFoundError(ServiceError):
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} not found: {identifier}",
            "NOT_FOUND",
            {"resource": resource, "identifier": str(identifier)}
        )
        self.resource = resource


class BusinessRuleError(ServiceError):
    def __init__(self, message: str, rule: str = None):
        super().__init__(message, "BUSINESS_RULE_VIOLATION", {"rule": rule})


class InsufficientStockError(ServiceError):
    def __init__(self, sku: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for SKU {sku}. Available: {available}, requested: {requested}",
            "INSUFFICIENT_STOCK",
            {"sku": sku, "available": available, "requested": requested}
        )
        self.sku = sku
        self.available = available
        self.requested = requested


class InvalidTransitionError(ServiceError):
    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot change order status from {current} to {target}",
            "INVALID_TRANSITION",
            {"current_status": current, "requested_status": target}
        )


class TenantResolutionError(ServiceError):
    def __init__(self, message: str, missing: str = None):
        super().__init__(message, "TENANT_RESOLUTION_ERROR", {"missing": missing})


def success_response(data: Any = None, message: str = "Success") -> Dict:
    response = {"success": True, "message": message}
    if data is not None:
        if isinstance(data, dict):
            response.update(data)
        else:
            response["data"] = data
    return response


def error_response(message: str, code: str = "ERROR", details: Dict = None) -> Dict:
    return {
        "success": False,
        "message": message,
        "error_code": code,
        "details": details or {}
    }


def paginate_queryset(queryset, page: int = 1, per_page: int = 20) -> Tuple[List, Dict]:
    page = max(1, page)
    per_page = min(max(1, per_page), 100)

    total = queryset.count()
    total_pages = (total + per_page - 1) // per_page

    offset = (page - 1) * per_page
    items = list(queryset[offset:offset + per_page])

    return items, {
        "page": page,
        "per_page": per_page,
        "total_items": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def round_money(value: Decimal) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_date(value: Any, field: str = "date") -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)", field)
    return parsed


def to_datetime(value: Any, field: str = "as_of") -> Optional[datetime]:
    """Parse an ISO date or datetime; naive values are read in the current timezone."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = parse_datetime(str(value))
            if parsed is None:
                day = parse_date(str(value))
                parsed = datetime(day.year, day.month, day.day) if day else None
        except ValueError:
            parsed = None
    if parsed is None:
        raise ValidationError(f"{field} must be an ISO date or datetime", field)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def generate_number(prefix: str, model_class: Model, field: str = "order_number", attempts: int = 5) -> str:
    """
    Build a `PREFIX-<timestamp>-<random>` identifier that is not yet used by
    `model_class.<field>`. The unique constraint on the column stays the final
    guard against two workers picking the same value.
    """
    for _ in range(attempts):
        candidate = f"{prefix}-{timezone.now():%Y%m%d%H%M%S}-{secrets.token_hex(3).upper()}"
        if not model_class.objects.filter(**{field: candidate}).exists():
            return candidate
    raise BusinessRuleError(f"Could not generate a unique {field}", "unique_number")


def parse_positive_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive integer", field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a positive integer", field)
    if number != value and str(number) != str(value).strip():
        raise ValidationError(f"{field} must be a positive integer", field)
    if number <= 0:
        raise ValidationError(f"{field} must be a positive integer", field)
    return number


class BaseService:
    model = None

    @classmethod
    def for_distributor(cls, distributor_id: int = None):
        """Every row, or one distributor's rows when an id is given"""
        queryset = cls.model.objects.all()
        if distributor_id is not None:
            queryset = queryset.filter(distributor_id=distributor_id)
        return queryset

    @classmethod
    def get_or_404(cls, id: int, distributor_id: int = None, queryset=None) -> Model:
        if queryset is None:
            queryset = cls.for_distributor(distributor_id)
        obj = queryset.filter(id=id).first()
        if not obj:
            raise NotFoundError(cls.model.__name__, id)
        return obj
