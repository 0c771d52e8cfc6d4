"""
Inventory Ledger - authoritative lot quantities and the movement audit trail.

Every quantity change goes through `_apply_movement`, which updates one lot
and writes exactly one StockMovement row for it. Nothing else in the project
writes `InventoryLot.stock_quantity`.
"""
import logging
from typing import Dict, Any, List

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from stock.models import Product, InventoryLot, StockMovement
from stock.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, InsufficientStockError,
    parse_positive_int, to_date,
)

logger = logging.getLogger(__name__)

FEFO_ORDER = ("expiration_date", "created_at", "id")


class InventoryLedgerService(BaseService):
    """Per-distributor, per-lot stock with audited movements"""

    model = InventoryLot

    # ==================== SERIALIZATION ====================

    @classmethod
    def serialize_lot(cls, lot: InventoryLot) -> Dict[str, Any]:
        today = timezone.localdate()
        return {
            "id": lot.id,
            "lot_number": lot.lot_number,
            "product_id": lot.product_id,
            "stock_quantity": lot.stock_quantity,
            "expiration_date": lot.expiration_date.isoformat(),
            "days_to_expiry": (lot.expiration_date - today).days,
            "is_expired": lot.expiration_date < today,
            "is_active": lot.is_active,
        }

    @classmethod
    def serialize_movement(cls, movement: StockMovement) -> Dict[str, Any]:
        return {
            "id": movement.id,
            "lot_id": movement.lot_id,
            "lot_number": movement.lot.lot_number,
            "sku": movement.lot.product.sku,
            "movement_type": movement.movement_type,
            "quantity": movement.quantity,
            "previous_stock": movement.previous_stock,
            "new_stock": movement.new_stock,
            "reason": movement.reason,
            "order_id": movement.order_id,
            "created_at": movement.created_at.isoformat(),
        }

    # ==================== LOOKUPS ====================

    @classmethod
    def get_product(cls, distributor_id: int, sku: str) -> Product:
        """Resolve an active product by SKU inside one distributor"""
        product = Product.objects.filter(
            distributor_id=distributor_id, sku=sku, is_active=True
        ).first()
        if not product:
            raise NotFoundError("Product", sku)
        return product

    @classmethod
    def stock_totals(cls, distributor_id: int, product_ids=None) -> Dict[int, int]:
        """Map product id -> units across active lots"""
        queryset = InventoryLot.objects.filter(
            distributor_id=distributor_id, is_active=True
        )
        if product_ids is not None:
            queryset = queryset.filter(product_id__in=product_ids)
        rows = queryset.values("product_id").annotate(total=Sum("stock_quantity"))
        return {row["product_id"]: row["total"] or 0 for row in rows}

    @classmethod
    def total_for(cls, product: Product) -> int:
        return InventoryLot.objects.filter(
            product=product, distributor_id=product.distributor_id, is_active=True
        ).aggregate(total=Coalesce(Sum("stock_quantity"), 0))["total"]

    @classmethod
    def get_available_stock(cls, distributor_id: int, sku: str) -> Dict[str, Any]:
        product = cls.get_product(distributor_id, sku)
        lots = list(
            InventoryLot.objects.filter(
                product=product, distributor_id=distributor_id, is_active=True
            ).order_by(*FEFO_ORDER)
        )
        return success_response({
            "product_id": product.id,
            "sku": product.sku,
            "name": product.name,
            "price": str(product.effective_price),
            "stock": sum(lot.stock_quantity for lot in lots),
            "lots": [cls.serialize_lot(lot) for lot in lots],
        })

    # ==================== MOVEMENTS ====================

    @classmethod
    def _apply_movement(cls,
                        lot: InventoryLot,
                        movement_type: str,
                        delta: int,
                        reason: str,
                        order=None) -> StockMovement:
        """Apply a signed delta to an already locked lot and record it"""
        previous = lot.stock_quantity
        new_stock = previous + delta
        if new_stock < 0:
            raise InsufficientStockError(lot.product.sku, previous, -delta)

        lot.stock_quantity = new_stock
        lot.save(update_fields=["stock_quantity", "updated_at"])

        movement = StockMovement.objects.create(
            lot=lot,
            movement_type=movement_type,
            quantity=delta if movement_type == StockMovement.MovementType.ADJUSTMENT else abs(delta),
            previous_stock=previous,
            new_stock=new_stock,
            reason=reason or "",
            order=order,
        )
        logger.info(
            f"{movement_type} lot={lot.lot_number} sku={lot.product.sku} "
            f"{previous} -> {new_stock} ({reason})"
        )
        return movement

    @classmethod
    @transaction.atomic
    def decrement_stock(cls,
                        distributor_id: int,
                        sku: str,
                        quantity: int,
                        reason: str = None,
                        order=None) -> Dict[str, Any]:
        """
        Consume `quantity` units FEFO: earliest expiration first, then oldest
        lot. The product's lots stay locked until the surrounding transaction
        ends, so concurrent confirmations on the same product serialize here.
        """
        quantity = parse_positive_int(quantity, "quantity")
        product = cls.get_product(distributor_id, sku)
        reason = reason or settings.STOCK_LEDGER["DEFAULT_OUTBOUND_REASON"]

        lots = list(
            InventoryLot.objects.select_for_update(of=("self",))
            .select_related("product")
            .filter(
                product=product,
                distributor_id=distributor_id,
                is_active=True,
                stock_quantity__gt=0,
            )
            .order_by(*FEFO_ORDER)
        )
        available = sum(lot.stock_quantity for lot in lots)
        if available < quantity:
            raise InsufficientStockError(product.sku, available, quantity)

        movements = []
        remaining = quantity
        for lot in lots:
            if remaining == 0:
                break
            take = min(lot.stock_quantity, remaining)
            movements.append(
                cls._apply_movement(lot, StockMovement.MovementType.OUTBOUND, -take, reason, order)
            )
            remaining -= take

        return success_response({
            "sku": product.sku,
            "quantity": quantity,
            "remaining_stock": available - quantity,
            "movements": [cls.serialize_movement(m) for m in movements],
        }, "Stock decremented")

    @classmethod
    @transaction.atomic
    def increment_stock(cls,
                        distributor_id: int,
                        sku: str,
                        quantity: int,
                        reason: str = "Stock intake",
                        lot_number: str = None,
                        expiration_date=None,
                        order=None) -> Dict[str, Any]:
        """
        Add units to a named lot. The lot is created when it does not exist
        yet and an expiration date is supplied.
        """
        quantity = parse_positive_int(quantity, "quantity")
        if not lot_number:
            raise ValidationError("lot_number is required", "lot_number")
        product = cls.get_product(distributor_id, sku)
        expiration_date = to_date(expiration_date, "expiration_date")

        lot = (
            InventoryLot.objects.select_for_update(of=("self",))
            .select_related("product")
            .filter(product=product, distributor_id=distributor_id, lot_number=lot_number)
            .first()
        )
        created = False
        if lot is None:
            if expiration_date is None:
                raise NotFoundError("Lot", lot_number)
            lot = InventoryLot.objects.create(
                product=product,
                distributor_id=distributor_id,
                lot_number=lot_number,
                expiration_date=expiration_date,
                stock_quantity=0,
            )
            created = True

        movement = cls._apply_movement(
            lot, StockMovement.MovementType.INBOUND, quantity, reason, order
        )
        return success_response({
            "lot": cls.serialize_lot(lot),
            "lot_created": created,
            "movement": cls.serialize_movement(movement),
        }, "Stock incremented")

    @classmethod
    @transaction.atomic
    def adjust_stock(cls,
                     lot_id: int,
                     delta: int,
                     reason: str,
                     distributor_id: int = None) -> Dict[str, Any]:
        """Manual correction by a signed delta; never below zero"""
        if isinstance(delta, bool):
            raise ValidationError("delta must be a non-zero integer", "delta")
        try:
            delta = int(delta)
        except (TypeError, ValueError):
            raise ValidationError("delta must be a non-zero integer", "delta")
        if delta == 0:
            raise ValidationError("delta must be a non-zero integer", "delta")
        if not reason:
            raise ValidationError("reason is required for adjustments", "reason")

        lot = cls.get_or_404(
            lot_id,
            queryset=cls.for_distributor(distributor_id)
            .select_for_update(of=("self",))
            .select_related("product"),
        )

        movement = cls._apply_movement(
            lot, StockMovement.MovementType.ADJUSTMENT, delta, reason
        )
        return success_response({
            "lot": cls.serialize_lot(lot),
            "movement": cls.serialize_movement(movement),
        }, "Stock adjusted")

    @classmethod
    @transaction.atomic
    def restock_order(cls, order, reason: str = None) -> List[StockMovement]:
        """
        Return every unit an order took out, to the same lots it came from.
        Used when a confirmed order is cancelled.
        """
        reason = reason or settings.STOCK_LEDGER["CANCELLATION_REASON"]
        outbound = list(
            StockMovement.objects.filter(
                order=order, movement_type=StockMovement.MovementType.OUTBOUND
            ).order_by("id")
        )
        if not outbound:
            return []

        lots = {
            lot.id: lot
            for lot in InventoryLot.objects.select_for_update(of=("self",))
            .select_related("product")
            .filter(id__in={m.lot_id for m in outbound})
        }
        return [
            cls._apply_movement(
                lots[m.lot_id], StockMovement.MovementType.INBOUND, m.quantity, reason, order
            )
            for m in outbound
        ]

    # ==================== HISTORY ====================

    @classmethod
    def list_movements(cls,
                       distributor_id: int,
                       sku: str = None,
                       movement_type: str = None,
                       order_id: int = None,
                       page: int = 1,
                       per_page: int = 50) -> Dict[str, Any]:
        queryset = StockMovement.objects.select_related("lot", "lot__product").filter(
            lot__distributor_id=distributor_id
        )
        if sku:
            queryset = queryset.filter(lot__product__sku=sku)
        if movement_type:
            if movement_type not in StockMovement.MovementType.values:
                raise ValidationError(f"Unknown movement type: {movement_type}", "movement_type")
            queryset = queryset.filter(movement_type=movement_type)
        if order_id:
            queryset = queryset.filter(order_id=order_id)

        movements, pagination = paginate_queryset(queryset, page, per_page)
        return success_response({
            "movements": [cls.serialize_movement(m) for m in movements],
            "pagination": pagination,
        })

