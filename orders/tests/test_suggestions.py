from datetime import timedelta

from django.conf import settings
from django.test import TestCase
from django.utils import timezone

from orders.models import Order
from orders.services import OrderPipelineService, SuggestionService
from stock.services.base_service import NotFoundError, ValidationError
from stock.tests.factories import (
    make_distributor, make_customer, make_product, make_lot,
)


class SuggestionTests(TestCase):
    def setUp(self):
        self.distributor = make_distributor()
        self.regular = make_customer(self.distributor, name="Supermercado Don Pepe")
        self.neighbour = make_customer(self.distributor, name="Almacén San José")
        self.newcomer = make_customer(self.distributor, name="MaxiKiosco Centro")

        make_lot(make_product(self.distributor, "HA-001", name="Yerba Mate 1Kg"), 20)
        make_lot(make_product(self.distributor, "HA-002", name="Café Molido 500g"), 2)
        make_lot(make_product(self.distributor, "EX-001", name="Yogur Bebible 1L"), 10, days_to_expiry=5)
        make_lot(make_product(self.distributor, "PO-001", name="Dulce de Leche 400g"), 30)
        make_lot(make_product(self.distributor, "IN-001", name="Discontinuado", is_active=False), 50)
        make_product(self.distributor, "NS-001", name="Sin Stock")

        self.place(self.regular, [{"sku": "HA-001", "quantity": 3}])
        self.place(self.regular, [{"sku": "HA-002", "quantity": 2}])
        self.place(self.neighbour, [{"sku": "PO-001", "quantity": 5}])

    def place(self, customer, items, days_ago=0):
        order = OrderPipelineService.create_order(
            distributor_id=self.distributor.id, client_id=customer.id, items=items
        )["order"]
        OrderPipelineService.confirm_order(order["id"], self.distributor.id)
        if days_ago:
            Order.objects.filter(id=order["id"]).update(
                created_at=timezone.now() - timedelta(days=days_ago)
            )
        return order

    def suggest(self, customer, **kwargs):
        return SuggestionService.suggest_products(self.distributor.id, customer.id, **kwargs)

    def by_sku(self, result):
        return {s["sku"]: s for s in result["suggestions"]}

    def test_ranking(self):
        result = self.suggest(self.regular, top_n=10)

        self.assertEqual(
            [s["sku"] for s in result["suggestions"]],
            ["EX-001", "HA-001", "HA-002", "PO-001"],
        )

    def test_same_inputs_give_same_output(self):
        as_of = timezone.now()

        first = self.suggest(self.regular, as_of=as_of, top_n=10)
        second = self.suggest(self.regular, as_of=as_of, top_n=10)

        self.assertEqual(first["suggestions"], second["suggestions"])

    def test_habitual_product_without_stock_is_kept(self):
        coffee = self.by_sku(self.suggest(self.regular, top_n=10))["HA-002"]

        self.assertTrue(coffee["f_client_bought_before"])
        self.assertFalse(coffee["f_has_stock"])
        self.assertEqual(coffee["f_stock_total"], 0)
        self.assertIn("habitual", coffee["reasons"])
        self.assertIn("out_of_stock", coffee["reasons"])

    def test_client_features(self):
        yerba = self.by_sku(self.suggest(self.regular, top_n=10))["HA-001"]

        self.assertEqual(yerba["f_client_orders_cnt_26w"], 1)
        self.assertEqual(yerba["f_client_qty_26w"], 3)
        self.assertEqual(yerba["f_global_buyers_cnt_1y"], 1)
        self.assertIsNotNone(yerba["f_last_buy_at"])
        self.assertIn("popular", yerba["reasons"])

    def test_expiring_stock_is_flagged(self):
        yogurt = self.by_sku(self.suggest(self.regular, top_n=10))["EX-001"]

        self.assertTrue(yogurt["f_expiring_soon"])
        self.assertEqual(yogurt["f_min_days_to_expiry"], 5)
        self.assertIn("expiring_soon", yogurt["reasons"])
        self.assertIn("new", yogurt["reasons"])

    def test_inactive_and_stockless_unbought_products_are_excluded(self):
        skus = set(self.by_sku(self.suggest(self.regular, top_n=50)))

        self.assertNotIn("IN-001", skus)
        self.assertNotIn("NS-001", skus)

    def test_client_without_history_gets_catalog_suggestions(self):
        result = self.suggest(self.newcomer, top_n=10)

        self.assertEqual(result["count"], 3)
        for suggestion in result["suggestions"]:
            self.assertFalse(suggestion["f_client_bought_before"])
            self.assertNotIn("habitual", suggestion["reasons"])

    def test_drafts_and_cancelled_orders_do_not_count(self):
        draft = OrderPipelineService.create_order(
            distributor_id=self.distributor.id,
            client_id=self.newcomer.id,
            items=[{"sku": "PO-001", "quantity": 1}],
        )["order"]
        cancelled = self.place(self.newcomer, [{"sku": "HA-001", "quantity": 1}])
        OrderPipelineService.update_order_status(cancelled["id"], "CANCELLED", self.distributor.id)

        suggestions = self.by_sku(self.suggest(self.newcomer, top_n=10))

        self.assertEqual(draft["status"], "DRAFT")
        self.assertFalse(suggestions["PO-001"]["f_client_bought_before"])
        self.assertFalse(suggestions["HA-001"]["f_client_bought_before"])
        self.assertEqual(suggestions["HA-001"]["f_global_orders_cnt_1y"], 1)

    def test_old_sales_fall_outside_the_windows(self):
        self.place(self.newcomer, [{"sku": "PO-001", "quantity": 4}], days_ago=400)

        fudge = self.by_sku(self.suggest(self.newcomer, top_n=10))["PO-001"]

        self.assertEqual(fudge["f_client_orders_cnt_26w"], 0)
        self.assertEqual(fudge["f_global_orders_cnt_1y"], 1)
        self.assertFalse(fudge["f_is_new"])

    def test_top_n(self):
        self.assertEqual(self.suggest(self.regular, top_n=2)["count"], 2)
        self.assertEqual(self.suggest(self.regular)["count"], 4)
        with self.assertRaises(ValidationError):
            self.suggest(self.regular, top_n=0)

    def test_unknown_client(self):
        stranger = make_customer(make_distributor("Lácteos del Sur"), name="Otro")

        with self.assertRaises(NotFoundError):
            self.suggest(stranger)

    def test_discount_is_scored_and_tagged(self):
        make_lot(make_product(self.distributor, "DC-001", price="100.00", discounted_price="80.00"), 10)
        make_lot(make_product(self.distributor, "DC-002", price="100.00"), 10)

        suggestions = self.by_sku(self.suggest(self.newcomer, top_n=50))
        discounted, regular = suggestions["DC-001"], suggestions["DC-002"]

        self.assertTrue(discounted["f_has_discount"])
        self.assertEqual(discounted["f_discount_percentage"], 20.0)
        self.assertIn("discount", discounted["reasons"])
        self.assertFalse(regular["f_has_discount"])
        self.assertEqual(regular["f_discount_percentage"], 0.0)
        self.assertNotIn("discount", regular["reasons"])
        weight = settings.SUGGESTION_ENGINE["WEIGHTS"]["DISCOUNT"]
        self.assertAlmostEqual(discounted["score"] - regular["score"], weight * 100)

    def test_small_discounts_score_less(self):
        make_lot(make_product(self.distributor, "DC-003", price="100.00", discounted_price="93.00"), 10)
        make_lot(make_product(self.distributor, "DC-004", price="100.00", discounted_price="85.00"), 10)

        with self.settings(SUGGESTION_ENGINE={**settings.SUGGESTION_ENGINE, "WEIGHTS": {"DISCOUNT": 1.0}}):
            suggestions = self.by_sku(self.suggest(self.newcomer, top_n=50))

        self.assertEqual(suggestions["DC-003"]["score"], 25.0)
        self.assertEqual(suggestions["DC-004"]["score"], 75.0)

    def test_repeat_buying_raises_rotation(self):
        self.place(self.neighbour, [{"sku": "PO-001", "quantity": 5}])
        self.place(self.neighbour, [{"sku": "PO-001", "quantity": 5}])

        with self.settings(SUGGESTION_ENGINE={**settings.SUGGESTION_ENGINE, "WEIGHTS": {"HIGH_ROTATION": 1.0}}):
            suggestions = self.by_sku(self.suggest(self.newcomer, top_n=10))

        self.assertEqual(suggestions["PO-001"]["score"], 150.0)
        self.assertEqual(suggestions["HA-001"]["score"], 50.0)
        self.assertEqual(suggestions["EX-001"]["score"], 0.0)


class SuggestionTieBreakTests(TestCase):
    """With every weight at zero the order falls to the tie-break chain"""

    def setUp(self):
        self.distributor = make_distributor()
        self.customer = make_customer(self.distributor, name="Supermercado Don Pepe")
        other = make_customer(self.distributor, name="Almacén San José")

        for sku, days_to_expiry in (
            ("WW-HEX", 5), ("ZZ-HAB", 90), ("YY-EXP", 5), ("XX-POP", 90), ("AA-PLN", 90), ("BB-PLN", 90),
        ):
            make_lot(make_product(self.distributor, sku), 10, days_to_expiry=days_to_expiry)

        for customer, sku in ((self.customer, "WW-HEX"), (self.customer, "ZZ-HAB"), (other, "XX-POP")):
            order = OrderPipelineService.create_order(
                distributor_id=self.distributor.id,
                client_id=customer.id,
                items=[{"sku": sku, "quantity": 1}],
            )["order"]
            OrderPipelineService.confirm_order(order["id"], self.distributor.id)

    def test_tie_break_order(self):
        with self.settings(SUGGESTION_ENGINE={**settings.SUGGESTION_ENGINE, "WEIGHTS": {}}):
            result = SuggestionService.suggest_products(self.distributor.id, self.customer.id, top_n=10)

        self.assertEqual({s["score"] for s in result["suggestions"]}, {0.0})
        self.assertEqual(
            [s["sku"] for s in result["suggestions"]],
            ["WW-HEX", "ZZ-HAB", "YY-EXP", "XX-POP", "AA-PLN", "BB-PLN"],
        )
