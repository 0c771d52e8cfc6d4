import json
import logging

from django.http import JsonResponse
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django.utils.decorators import method_decorator

from stock.services import (
    ServiceError, ValidationError, NotFoundError, BusinessRuleError,
    InsufficientStockError, InvalidTransitionError, TenantResolutionError,
    InventoryLedgerService, CatalogService,
)

logger = logging.getLogger(__name__)

DISTRIBUTOR_HEADER = "X-Distributor-Id"


def error_response(message: str, code: str = "error", status: int = 400, details: dict = None):
    data = {"success": False, "error": {"code": code, "message": message}}
    if details:
        data["error"]["details"] = details
    return JsonResponse(data, status=status)


def handle_service_error(e: Exception):
    if isinstance(e, ValidationError):
        return error_response(e.message, "validation_error", 400, {"field": e.field})
    elif isinstance(e, TenantResolutionError):
        return error_response(e.message, "tenant_resolution", 400, e.details)
    elif isinstance(e, NotFoundError):
        return error_response(e.message, "not_found", 404, e.details)
    elif isinstance(e, InsufficientStockError):
        return error_response(e.message, "insufficient_stock", 409, e.details)
    elif isinstance(e, InvalidTransitionError):
        return error_response(e.message, "invalid_transition", 409, e.details)
    elif isinstance(e, BusinessRuleError):
        return error_response(e.message, "business_rule", 400)
    elif isinstance(e, ServiceError):
        return error_response(e.message, e.code.lower(), 400, e.details)
    else:
        logger.exception("Unhandled error while serving request")
        return error_response("Internal server error", "server_error", 500)


class BaseApiView(View):
    @method_decorator(csrf_exempt)
    def dispatch(self, request, *args, **kwargs):
        return super().dispatch(request, *args, **kwargs)

    def get_json_body(self, request):
        try:
            return json.loads(request.body) if request.body else {}
        except json.JSONDecodeError:
            return {}

    def get_distributor_id(self, request) -> int:
        raw = request.headers.get(DISTRIBUTOR_HEADER)
        if not raw:
            raise TenantResolutionError(f"{DISTRIBUTOR_HEADER} header is required", "distributor_id")
        try:
            return int(raw)
        except ValueError:
            raise TenantResolutionError(f"{DISTRIBUTOR_HEADER} must be an integer", "distributor_id")

    def get_int_param(self, request, name: str, default: int = None):
        raw = request.GET.get(name)
        if raw in (None, ""):
            return default
        try:
            return int(raw)
        except ValueError:
            raise ValidationError(f"{name} must be an integer", name)

    def success(self, data: dict, status: int = 200):
        return JsonResponse({"success": True, **data}, status=status)


# ==================== CATALOG ====================

class StockSearchView(BaseApiView):

    def get(self, request):
        try:
            result = CatalogService.search_stock(
                distributor_id=self.get_distributor_id(request),
                query=request.GET.get("q", ""),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class ProductCreateView(BaseApiView):

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = CatalogService.create_product(
                distributor_id=self.get_distributor_id(request),
                sku=data.get("sku"),
                name=data.get("name"),
                base_price=data.get("base_price"),
                discounted_price=data.get("discounted_price"),
                description=data.get("description", ""),
                initial_stock=data.get("initial_stock", 0),
                lot_number=data.get("lot_number"),
                expiration_date=data.get("expiration_date"),
            )
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class ProductStockView(BaseApiView):

    def get(self, request, sku):
        try:
            result = InventoryLedgerService.get_available_stock(
                self.get_distributor_id(request), sku
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class ExpiringLotsView(BaseApiView):

    def get(self, request):
        try:
            result = CatalogService.list_expiring(
                distributor_id=self.get_distributor_id(request),
                days=self.get_int_param(request, "days"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


# ==================== LEDGER ====================

class StockIntakeView(BaseApiView):

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = InventoryLedgerService.increment_stock(
                distributor_id=self.get_distributor_id(request),
                sku=data.get("sku"),
                quantity=data.get("quantity"),
                reason=data.get("reason") or "Stock intake",
                lot_number=data.get("lot_number"),
                expiration_date=data.get("expiration_date"),
            )
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class LotAdjustView(BaseApiView):

    def post(self, request, lot_id):
        try:
            data = self.get_json_body(request)
            result = InventoryLedgerService.adjust_stock(
                lot_id=lot_id,
                delta=data.get("delta"),
                reason=data.get("reason"),
                distributor_id=self.get_distributor_id(request),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class MovementListView(BaseApiView):

    def get(self, request):
        try:
            result = InventoryLedgerService.list_movements(
                distributor_id=self.get_distributor_id(request),
                sku=request.GET.get("sku"),
                movement_type=request.GET.get("type"),
                order_id=self.get_int_param(request, "order_id"),
                page=self.get_int_param(request, "page", 1),
                per_page=self.get_int_param(request, "per_page", 50),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
