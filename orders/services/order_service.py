"""
Order Pipeline - draft creation with a stock pre-check, atomic confirmation
and the order status state machine.

Drafts never touch the ledger. Stock is only taken on confirmation, inside one
transaction spanning every item, and given back when a confirmed order is
cancelled.
"""
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Any, List

from django.db import IntegrityError, transaction
from django.utils import timezone

from directory.models import Salesperson
from directory.services import CustomerService
from orders.models import Order, OrderItem
from stock.models import StockMovement
from stock.services import InventoryLedgerService
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ServiceError, ValidationError, NotFoundError, InsufficientStockError,
    InvalidTransitionError, generate_number, parse_positive_int, round_money,
)

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "ORD"
ORDER_NUMBER_ATTEMPTS = 3


class OrderPipelineService(BaseService):
    model = Order

    # ==================== SERIALIZATION ====================

    @classmethod
    def serialize(cls, order: Order) -> Dict[str, Any]:
        items = [
            {
                "id": item.id,
                "product_id": item.product_id,
                "sku": item.product.sku,
                "name": item.product.name,
                "quantity": item.quantity,
                "unit_price": str(item.unit_price),
                "subtotal": str(item.subtotal),
            }
            for item in order.items.select_related("product").order_by("id")
        ]
        return {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "status_display": order.get_status_display(),
            "total": str(order.total),
            "distributor_id": order.distributor_id,
            "client": {
                "id": order.client_id,
                "name": order.client.name,
            },
            "salesperson_id": order.salesperson_id,
            "delivery_address": order.delivery_address or None,
            "notes": order.notes or None,
            "items": items,
            "item_count": len(items),
            "created_at": order.created_at.isoformat(),
            "confirmed_at": order.confirmed_at.isoformat() if order.confirmed_at else None,
        }

    # ==================== HELPERS ====================

    @classmethod
    def normalize_items(cls, items) -> "OrderedDict[str, int]":
        """Validate requested lines and merge repeated SKUs, keeping first-seen order"""
        if not isinstance(items, (list, tuple)) or not items:
            raise ValidationError("An order needs at least one item", "items")

        merged = OrderedDict()
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValidationError(f"Item {index + 1} must be an object with sku and quantity", "items")
            sku = str(item.get("sku") or "").strip()
            if not sku:
                raise ValidationError(f"Item {index + 1} is missing a sku", "items")
            quantity = parse_positive_int(item.get("quantity"), "quantity")
            merged[sku] = merged.get(sku, 0) + quantity
        return merged

    @classmethod
    def _scoped(cls, distributor_id: int = None, client_id: int = None):
        queryset = cls.for_distributor(distributor_id).select_related("client")
        if client_id is not None:
            queryset = queryset.filter(client_id=client_id)
        return queryset

    @classmethod
    def _lock(cls, order_id: int, distributor_id: int = None) -> Order:
        return cls.get_or_404(
            order_id, queryset=cls._scoped(distributor_id).select_for_update(of=("self",))
        )

    # ==================== CREATE ====================

    @classmethod
    @transaction.atomic
    def create_order(cls,
                     distributor_id: int,
                     client_id: int,
                     items: List[Dict[str, Any]],
                     salesperson_id: int = None,
                     delivery_address: str = "",
                     notes: str = "") -> Dict[str, Any]:
        """
        Persist a DRAFT order. Availability is checked without locking; the
        authoritative check happens again when the order is confirmed.
        """
        if not client_id:
            raise ValidationError("client_id is required", "client_id")
        requested = cls.normalize_items(items)
        client = CustomerService.get_for_distributor(distributor_id, client_id)

        if salesperson_id is not None and not Salesperson.objects.filter(
            id=salesperson_id, distributor_id=distributor_id
        ).exists():
            raise NotFoundError("Salesperson", salesperson_id)

        products = OrderedDict(
            (sku, InventoryLedgerService.get_product(distributor_id, sku))
            for sku in requested
        )
        available = InventoryLedgerService.stock_totals(
            distributor_id, [p.id for p in products.values()]
        )
        for sku, quantity in requested.items():
            in_stock = available.get(products[sku].id, 0)
            if in_stock < quantity:
                raise InsufficientStockError(sku, in_stock, quantity)

        order = None
        for attempt in range(ORDER_NUMBER_ATTEMPTS):
            try:
                with transaction.atomic():
                    order = Order.objects.create(
                        order_number=generate_number(ORDER_NUMBER_PREFIX, Order),
                        distributor_id=distributor_id,
                        client=client,
                        salesperson_id=salesperson_id,
                        delivery_address=delivery_address or client.address,
                        notes=notes or "",
                    )
                break
            except IntegrityError:
                if attempt == ORDER_NUMBER_ATTEMPTS - 1:
                    raise
                logger.warning("Order number collision, retrying")

        total = Decimal("0")
        lines = []
        for sku, quantity in requested.items():
            product = products[sku]
            unit_price = round_money(product.effective_price)
            subtotal = unit_price * quantity
            total += subtotal
            lines.append(OrderItem(
                order=order,
                product=product,
                quantity=quantity,
                unit_price=unit_price,
                subtotal=subtotal,
            ))
        OrderItem.objects.bulk_create(lines)

        order.total = total
        order.save(update_fields=["total", "updated_at"])

        logger.info(
            f"Order {order.order_number} created for client {client.id} "
            f"({len(lines)} items, total {total})"
        )
        return success_response({"order": cls.serialize(order)}, "Order created")

    # ==================== CONFIRM ====================

    @classmethod
    @transaction.atomic
    def confirm_order(cls, order_id: int, distributor_id: int = None) -> Dict[str, Any]:
        """
        DRAFT -> CONFIRMED. Every item is decremented through the ledger in
        this one transaction; a single shortage rolls all of them back and
        the order stays DRAFT.
        """
        order = cls._lock(order_id, distributor_id)
        if order.status != Order.Status.DRAFT:
            raise InvalidTransitionError(order.status, Order.Status.CONFIRMED)

        try:
            for item in order.items.select_related("product").order_by("id"):
                InventoryLedgerService.decrement_stock(
                    distributor_id=order.distributor_id,
                    sku=item.product.sku,
                    quantity=item.quantity,
                    order=order,
                )
        except InsufficientStockError as e:
            logger.warning(f"Order {order.order_number} not confirmed: {e.message}")
            raise

        order.status = Order.Status.CONFIRMED
        order.confirmed_at = timezone.now()
        order.save(update_fields=["status", "confirmed_at", "updated_at"])

        logger.info(f"Order {order.order_number} confirmed")
        return success_response({"order": cls.serialize(order)}, "Order confirmed")

    # ==================== STATUS ====================

    @classmethod
    @transaction.atomic
    def update_order_status(cls,
                            order_id: int,
                            new_status: str,
                            distributor_id: int = None) -> Dict[str, Any]:
        if new_status not in Order.Status.values:
            raise ValidationError(f"Unknown order status: {new_status}", "status")

        order = cls._lock(order_id, distributor_id)
        if not order.can_transition_to(new_status):
            raise InvalidTransitionError(order.status, new_status)

        if new_status == Order.Status.CONFIRMED:
            return cls.confirm_order(order.id, distributor_id)

        previous = order.status
        restocked = []
        if new_status == Order.Status.CANCELLED and order.stock_movements.filter(
            movement_type=StockMovement.MovementType.OUTBOUND
        ).exists():
            restocked = InventoryLedgerService.restock_order(order)

        order.status = new_status
        order.save(update_fields=["status", "updated_at"])

        logger.info(f"Order {order.order_number}: {previous} -> {new_status}")
        return success_response({
            "order": cls.serialize(order),
            "restocked_movements": len(restocked),
        }, "Order status updated")

    @classmethod
    def bulk_update_status(cls,
                           order_ids: List[int],
                           new_status: str,
                           distributor_id: int) -> Dict[str, Any]:
        """Apply one status to many orders; each order succeeds or fails on its own"""
        if not isinstance(order_ids, (list, tuple)) or not order_ids:
            raise ValidationError("order_ids must be a non-empty list", "order_ids")

        results = []
        for order_id in order_ids:
            try:
                result = cls.update_order_status(order_id, new_status, distributor_id)
                results.append({
                    "order_id": order_id,
                    "success": True,
                    "status": result["order"]["status"],
                })
            except ServiceError as e:
                results.append({
                    "order_id": order_id,
                    "success": False,
                    "message": e.message,
                    "error_code": e.code,
                })

        updated = sum(1 for r in results if r["success"])
        return success_response({
            "results": results,
            "updated": updated,
            "failed": len(results) - updated,
        })

    # ==================== QUERIES ====================

    @classmethod
    def get_order_by_id(cls, order_id: int, distributor_id: int = None, client_id: int = None) -> Dict[str, Any]:
        order = cls.get_or_404(order_id, queryset=cls._scoped(distributor_id, client_id))
        return success_response({"order": cls.serialize(order)})

    @classmethod
    def get_order_by_number(cls, order_number: str, distributor_id: int = None, client_id: int = None) -> Dict[str, Any]:
        order = cls._scoped(distributor_id, client_id).filter(order_number=order_number).first()
        if not order:
            raise NotFoundError("Order", order_number)
        return success_response({"order": cls.serialize(order)})

    @classmethod
    def list_by_distributor(cls,
                            distributor_id: int,
                            status: str = None,
                            client_id: int = None,
                            page: int = 1,
                            per_page: int = 20) -> Dict[str, Any]:
        queryset = cls._scoped(distributor_id, client_id)
        if status:
            if status not in Order.Status.values:
                raise ValidationError(f"Unknown order status: {status}", "status")
            queryset = queryset.filter(status=status)

        orders, pagination = paginate_queryset(queryset.order_by("-created_at", "-id"), page, per_page)
        return success_response({
            "orders": [cls.serialize(o) for o in orders],
            "pagination": pagination,
            "statuses": [
                {"value": c[0], "label": c[1]}
                for c in Order.Status.choices
            ],
        })
