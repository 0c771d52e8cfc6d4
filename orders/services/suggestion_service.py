"""
Suggestion Engine - ranked, explainable product recommendations for a client.

Features are aggregated from order history and lot stock with the ORM (no
hand-built SQL), scored with the weights in settings.SUGGESTION_ENGINE and
sorted with a fixed tie-break chain so identical inputs give identical output.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional

from django.conf import settings
from django.db.models import Count, Max, Min, Sum
from django.utils import timezone

from directory.services import CustomerService
from orders.models import Order, OrderItem
from stock.models import Product, InventoryLot
from stock.services.base_service import (
    success_response, ValidationError, to_datetime,
)

logger = logging.getLogger(__name__)

# Days since the last purchase in which a reminder is most useful
REPEAT_WINDOW = (30, 180)

# (minimum discount %, score), checked from the top
DISCOUNT_TIERS = ((20, 100.0), (15, 75.0), (10, 50.0), (5, 25.0), (0, 10.0))


@dataclass
class ProductFeatures:
    product: Product
    client_orders: int = 0
    client_qty: int = 0
    last_buy_at: Optional[datetime] = None
    global_orders: int = 0
    global_buyers: int = 0
    global_qty: int = 0
    is_new: bool = False
    stock_total: int = 0
    min_days_to_expiry: Optional[int] = None
    expiring_soon: bool = False
    score: float = 0.0
    reasons: List[str] = field(default_factory=list)

    @property
    def bought_before(self) -> bool:
        return self.client_orders > 0

    @property
    def has_stock(self) -> bool:
        return self.stock_total > 0

    @property
    def expiring_with_stock(self) -> bool:
        return self.expiring_soon and self.has_stock

    @property
    def discount_percentage(self) -> float:
        base = self.product.base_price
        discounted = self.product.discounted_price
        if discounted is None or not base or discounted >= base:
            return 0.0
        return round(float((base - discounted) / base * 100), 2)

    @property
    def has_discount(self) -> bool:
        return self.discount_percentage > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product.id,
            "sku": self.product.sku,
            "name": self.product.name,
            "price": str(self.product.effective_price),
            "f_client_orders_cnt_26w": self.client_orders,
            "f_client_qty_26w": self.client_qty,
            "f_last_buy_at": self.last_buy_at.isoformat() if self.last_buy_at else None,
            "f_client_bought_before": self.bought_before,
            "f_global_orders_cnt_1y": self.global_orders,
            "f_global_buyers_cnt_1y": self.global_buyers,
            "f_global_qty_1y": self.global_qty,
            "f_is_new": self.is_new,
            "f_stock_total": self.stock_total,
            "f_min_days_to_expiry": self.min_days_to_expiry,
            "f_has_stock": self.has_stock,
            "f_expiring_soon": self.expiring_soon,
            "f_has_discount": self.has_discount,
            "f_discount_percentage": self.discount_percentage,
            "score": round(self.score, 4),
            "reasons": list(self.reasons),
        }


class SuggestionService:

    # ==================== SCORING ====================

    @staticmethod
    def client_affinity(features: ProductFeatures, as_of: datetime) -> float:
        if not features.bought_before:
            return 0.0
        score = features.client_qty * 10 + features.client_orders * 5 + 20
        if features.last_buy_at:
            days_since = (as_of - features.last_buy_at).days
            if REPEAT_WINDOW[0] < days_since < REPEAT_WINDOW[1]:
                score += 15
        return float(score)

    @staticmethod
    def global_popularity(features: ProductFeatures) -> float:
        return (
            features.global_orders * 2
            + features.global_buyers * 3
            + features.global_qty * 0.1
        )

    @staticmethod
    def high_rotation(features: ProductFeatures) -> float:
        """Repeat orders per buyer over the global window"""
        if not features.global_buyers:
            return 0.0
        return features.global_orders / features.global_buyers * 50

    @staticmethod
    def discount(features: ProductFeatures) -> float:
        if not features.has_discount:
            return 0.0
        for minimum, score in DISCOUNT_TIERS:
            if features.discount_percentage >= minimum:
                return score
        return 0.0

    @classmethod
    def score(cls, features: ProductFeatures, as_of: datetime, weights: Dict[str, float]) -> float:
        components = {
            "CLIENT_AFFINITY": cls.client_affinity(features, as_of),
            "GLOBAL_POPULARITY": cls.global_popularity(features),
            "HIGH_ROTATION": cls.high_rotation(features),
            "DISCOUNT": cls.discount(features),
            "EXPIRY_URGENCY": 100.0 if features.expiring_with_stock else 0.0,
            "NOVELTY": 100.0 if features.is_new else 0.0,
            "IN_STOCK": 50.0 if features.has_stock else 0.0,
        }
        return sum(weights.get(name, 0.0) * value for name, value in components.items())

    @staticmethod
    def reasons_for(features: ProductFeatures) -> List[str]:
        reasons = []
        if features.bought_before:
            reasons.append("habitual")
        if features.expiring_with_stock:
            reasons.append("expiring_soon")
        if features.has_discount:
            reasons.append("discount")
        if features.global_orders > 0:
            reasons.append("popular")
        if features.is_new:
            reasons.append("new")
        if not features.has_stock:
            reasons.append("out_of_stock")
        return reasons

    @classmethod
    def sort_key(cls, features: ProductFeatures):
        return (
            -features.score,
            not features.bought_before,
            not features.expiring_with_stock,
            -cls.global_popularity(features),
            features.product.sku,
        )

    # ==================== FEATURES ====================

    @classmethod
    def build_features(cls, distributor_id: int, client_id: int, as_of: datetime) -> List[ProductFeatures]:
        config = settings.SUGGESTION_ENGINE
        client_since = as_of - timedelta(days=config["CLIENT_WINDOW_DAYS"])
        global_since = as_of - timedelta(days=config["GLOBAL_WINDOW_DAYS"])
        as_of_date = timezone.localtime(as_of).date()

        counted = OrderItem.objects.filter(
            order__distributor_id=distributor_id,
            order__status__in=Order.COUNTED_STATUSES,
            order__created_at__lte=as_of,
        )

        client_rows = {
            row["product_id"]: row
            for row in counted.filter(
                order__client_id=client_id, order__created_at__gte=client_since
            ).values("product_id").annotate(
                orders=Count("order_id", distinct=True),
                qty=Sum("quantity"),
                last_buy=Max("order__created_at"),
            )
        }
        global_rows = {
            row["product_id"]: row
            for row in counted.filter(order__created_at__gte=global_since)
            .values("product_id")
            .annotate(
                orders=Count("order_id", distinct=True),
                buyers=Count("order__client_id", distinct=True),
                qty=Sum("quantity"),
            )
        }
        stock_rows = {
            row["product_id"]: row
            for row in InventoryLot.objects.filter(
                distributor_id=distributor_id, is_active=True, stock_quantity__gt=0
            ).values("product_id").annotate(
                total=Sum("stock_quantity"),
                nearest=Min("expiration_date"),
            )
        }

        candidate_ids = set(stock_rows) | set(client_rows)
        products = Product.objects.filter(
            distributor_id=distributor_id, is_active=True, id__in=candidate_ids
        )
        first_sold = {
            row["product_id"]: row["first"]
            for row in counted.filter(product_id__in=candidate_ids)
            .values("product_id")
            .annotate(first=Min("order__created_at"))
        }

        features = []
        for product in products:
            client = client_rows.get(product.id, {})
            popular = global_rows.get(product.id, {})
            stock = stock_rows.get(product.id, {})

            first = first_sold.get(product.id)
            if first is not None:
                is_new = first >= global_since
            else:
                is_new = global_since <= product.created_at <= as_of

            min_days = None
            if stock.get("nearest") is not None:
                min_days = (stock["nearest"] - as_of_date).days

            features.append(ProductFeatures(
                product=product,
                client_orders=client.get("orders", 0),
                client_qty=client.get("qty") or 0,
                last_buy_at=client.get("last_buy"),
                global_orders=popular.get("orders", 0),
                global_buyers=popular.get("buyers", 0),
                global_qty=popular.get("qty") or 0,
                is_new=is_new,
                stock_total=stock.get("total") or 0,
                min_days_to_expiry=min_days,
                expiring_soon=min_days is not None and min_days <= config["EXPIRING_SOON_DAYS"],
            ))
        return features

    # ==================== PUBLIC API ====================

    @classmethod
    def suggest_products(cls,
                         distributor_id: int,
                         client_id: int,
                         as_of=None,
                         top_n: int = None) -> Dict[str, Any]:
        config = settings.SUGGESTION_ENGINE
        if top_n is None:
            top_n = config["DEFAULT_TOP_N"]
        if isinstance(top_n, bool) or not isinstance(top_n, int) or top_n < 1:
            raise ValidationError("top_n must be a positive integer", "top_n")
        top_n = min(top_n, config["MAX_TOP_N"])
        as_of = to_datetime(as_of, "as_of") or timezone.now()

        CustomerService.get_for_distributor(distributor_id, client_id)

        features = cls.build_features(distributor_id, client_id, as_of)
        weights = config["WEIGHTS"]
        for item in features:
            item.score = cls.score(item, as_of, weights)
            item.reasons = cls.reasons_for(item)
        features.sort(key=cls.sort_key)

        suggestions = [item.to_dict() for item in features[:top_n]]
        logger.info(
            f"Suggestions for client {client_id} (distributor {distributor_id}): "
            f"{len(suggestions)} of {len(features)} candidates"
        )
        return success_response({
            "client_id": client_id,
            "as_of": as_of.isoformat(),
            "suggestions": suggestions,
            "count": len(suggestions),
        })
