"""
Catalog Service - stock search, product intake and expiry listing
"""
import logging
from datetime import timedelta
from typing import Dict, Any, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from stock.models import Product, InventoryLot
from stock.services.base_service import (
    BaseService, success_response,
    ValidationError, to_decimal, to_date,
)
from stock.services.ledger_service import InventoryLedgerService, FEFO_ORDER
from stock.utils import normalize_text

logger = logging.getLogger(__name__)


def split_terms(query: str) -> List[str]:
    return [normalize_text(term) for term in (query or "").split(",") if term.strip()]


class CatalogService(BaseService):
    model = Product

    @classmethod
    def serialize(cls, product: Product, stock: int) -> Dict[str, Any]:
        return {
            "product_id": product.id,
            "sku": product.sku,
            "name": product.name,
            "price": str(product.effective_price),
            "available_stock": stock,
        }

    @classmethod
    def search_stock(cls, distributor_id: int, query: str = "") -> Dict[str, Any]:
        """
        Match any comma-separated term as a substring of name or SKU.
        Matching runs on normalized text, so it ignores case and accents.
        An empty query lists the whole active catalog.
        """
        terms = split_terms(query)

        products = cls.for_distributor(distributor_id).filter(is_active=True)
        if terms:
            matches = Q()
            for term in terms:
                matches |= Q(search_name__contains=term) | Q(search_sku__contains=term)
            products = products.filter(matches)

        products = (
            products
            .annotate(
                available=Coalesce(
                    Sum("lots__stock_quantity", filter=Q(lots__is_active=True)), 0
                )
            )
            .order_by("name", "sku")
        )

        results = [cls.serialize(product, product.available) for product in products]

        return success_response({
            "query": query,
            "products": results,
            "count": len(results),
        })

    @classmethod
    @transaction.atomic
    def create_product(cls,
                       distributor_id: int,
                       sku: str,
                       name: str,
                       base_price,
                       discounted_price=None,
                       description: str = "",
                       initial_stock: int = 0,
                       lot_number: str = None,
                       expiration_date=None) -> Dict[str, Any]:
        """
        Register a new product. When `initial_stock` is given the first lot
        is opened through the ledger so the intake has its INBOUND movement.
        """
        sku = (sku or "").strip()
        name = (name or "").strip()
        if not sku:
            raise ValidationError("sku is required", "sku")
        if not name:
            raise ValidationError("name is required", "name")

        price = to_decimal(base_price, None)
        if price is None or price < 0:
            raise ValidationError("base_price must be a non-negative amount", "base_price")
        discount = None
        if discounted_price not in (None, ""):
            discount = to_decimal(discounted_price, None)
            if discount is None or discount < 0:
                raise ValidationError("discounted_price must be a non-negative amount", "discounted_price")

        if Product.objects.filter(distributor_id=distributor_id, sku=sku).exists():
            raise ValidationError(f"A product with SKU {sku} already exists", "sku")

        product = Product.objects.create(
            distributor_id=distributor_id,
            sku=sku,
            name=name,
            description=description or "",
            base_price=price,
            discounted_price=discount,
        )
        logger.info(f"Product created: {sku} for distributor {distributor_id}")

        lot = None
        if initial_stock:
            if to_date(expiration_date, "expiration_date") is None:
                raise ValidationError(
                    "expiration_date is required when initial_stock is given", "expiration_date"
                )
            result = InventoryLedgerService.increment_stock(
                distributor_id=distributor_id,
                sku=sku,
                quantity=initial_stock,
                reason="Initial stock",
                lot_number=lot_number or f"{sku}-L1",
                expiration_date=expiration_date,
            )
            lot = result["lot"]

        return success_response({
            "product": cls.serialize(product, lot["stock_quantity"] if lot else 0),
            "lot": lot,
        }, "Product created")

    @classmethod
    def list_expiring(cls, distributor_id: int, days: Optional[int] = None) -> Dict[str, Any]:
        """Lots with stock whose expiration falls inside the alert window"""
        if days is None:
            days = settings.STOCK_LEDGER["EXPIRY_ALERT_DAYS"]
        if days < 0:
            raise ValidationError("days must not be negative", "days")
        today = timezone.localdate()

        lots = list(
            InventoryLot.objects.select_related("product")
            .filter(
                distributor_id=distributor_id,
                is_active=True,
                product__is_active=True,
                stock_quantity__gt=0,
                expiration_date__gte=today,
                expiration_date__lte=today + timedelta(days=days),
            )
            .order_by(*FEFO_ORDER)
        )
        return success_response({
            "lots": [
                {
                    **InventoryLedgerService.serialize_lot(lot),
                    "sku": lot.product.sku,
                    "name": lot.product.name,
                }
                for lot in lots
            ],
            "count": len(lots),
            "alert_days": days,
        })
