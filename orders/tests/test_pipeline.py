from decimal import Decimal

from django.test import TestCase

from orders.models import Order, OrderItem
from orders.services import OrderPipelineService
from stock.models import InventoryLot, StockMovement
from stock.services import InventoryLedgerService
from stock.services.base_service import (
    InsufficientStockError, InvalidTransitionError, NotFoundError, ValidationError,
)
from stock.tests.factories import (
    make_distributor, make_salesperson, make_customer, make_product, make_lot,
)


class PipelineTestCase(TestCase):
    def setUp(self):
        self.distributor = make_distributor()
        self.salesperson = make_salesperson(self.distributor)
        self.client_record = make_customer(
            self.distributor, address="Av. Corrientes 1234", salesperson=self.salesperson
        )
        self.product = make_product(self.distributor, "AR-001", price="150.00")
        self.lot = make_lot(self.product, 10)

    def create(self, items, **kwargs):
        return OrderPipelineService.create_order(
            distributor_id=self.distributor.id,
            client_id=self.client_record.id,
            items=items,
            **kwargs,
        )["order"]


class CreateOrderTests(PipelineTestCase):
    def test_draft_does_not_touch_stock(self):
        order = self.create([{"sku": "AR-001", "quantity": 4}])

        self.assertEqual(order["status"], "DRAFT")
        self.assertEqual(order["status_display"], "Pending")
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_total_is_sum_of_subtotals(self):
        make_lot(make_product(self.distributor, "AR-002", price="80.00", discounted_price="72.50"), 20)

        order = self.create([
            {"sku": "AR-001", "quantity": 3},
            {"sku": "AR-002", "quantity": 2},
        ])

        self.assertEqual(Decimal(order["total"]), Decimal("595.00"))
        stored = Order.objects.get(id=order["id"])
        self.assertEqual(
            stored.total, sum(item.subtotal for item in stored.items.all())
        )
        self.assertEqual(order["items"][1]["unit_price"], "72.50")

    def test_repeated_sku_lines_are_merged(self):
        order = self.create([
            {"sku": "AR-001", "quantity": 2},
            {"sku": "AR-001", "quantity": 3},
        ])

        self.assertEqual(order["item_count"], 1)
        self.assertEqual(order["items"][0]["quantity"], 5)

    def test_insufficient_stock_persists_nothing(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            self.create([{"sku": "AR-001", "quantity": 11}])

        self.assertEqual(ctx.exception.details, {"sku": "AR-001", "available": 10, "requested": 11})
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderItem.objects.exists())

    def test_validation(self):
        with self.assertRaises(ValidationError):
            self.create([])
        with self.assertRaises(ValidationError):
            self.create([{"sku": "AR-001", "quantity": 0}])
        with self.assertRaises(ValidationError):
            self.create([{"quantity": 1}])
        with self.assertRaises(NotFoundError):
            self.create([{"sku": "ZZ-999", "quantity": 1}])

    def test_client_of_another_distributor_is_not_found(self):
        stranger = make_customer(make_distributor("Lácteos del Sur"), name="Otro Cliente")

        with self.assertRaises(NotFoundError):
            OrderPipelineService.create_order(
                distributor_id=self.distributor.id,
                client_id=stranger.id,
                items=[{"sku": "AR-001", "quantity": 1}],
            )

    def test_defaults_delivery_address_to_client_address(self):
        order = self.create([{"sku": "AR-001", "quantity": 1}], salesperson_id=self.salesperson.id)

        self.assertEqual(order["delivery_address"], "Av. Corrientes 1234")
        self.assertEqual(order["salesperson_id"], self.salesperson.id)
        self.assertTrue(order["order_number"].startswith("ORD-"))


class ConfirmOrderTests(PipelineTestCase):
    def test_confirm_decrements_stock_once(self):
        order = self.create([{"sku": "AR-001", "quantity": 4}])

        result = OrderPipelineService.confirm_order(order["id"], self.distributor.id)

        self.assertEqual(result["order"]["status"], "CONFIRMED")
        self.assertIsNotNone(result["order"]["confirmed_at"])
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 6)
        movement = StockMovement.objects.get()
        self.assertEqual(movement.movement_type, StockMovement.MovementType.OUTBOUND)
        self.assertEqual(movement.quantity, 4)
        self.assertEqual(movement.order_id, order["id"])

    def test_second_confirmation_is_rejected(self):
        order = self.create([{"sku": "AR-001", "quantity": 4}])
        OrderPipelineService.confirm_order(order["id"], self.distributor.id)

        with self.assertRaises(InvalidTransitionError):
            OrderPipelineService.confirm_order(order["id"], self.distributor.id)

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 6)

    def test_competing_drafts_cannot_oversell(self):
        first = self.create([{"sku": "AR-001", "quantity": 6}])
        second = self.create([{"sku": "AR-001", "quantity": 6}])

        OrderPipelineService.confirm_order(first["id"], self.distributor.id)
        with self.assertRaises(InsufficientStockError):
            OrderPipelineService.confirm_order(second["id"], self.distributor.id)

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 4)
        self.assertEqual(Order.objects.get(id=second["id"]).status, Order.Status.DRAFT)

    def test_shortage_on_one_item_rolls_back_all(self):
        other = make_product(self.distributor, "AR-002")
        other_lot = make_lot(other, 5)
        order = self.create([
            {"sku": "AR-001", "quantity": 2},
            {"sku": "AR-002", "quantity": 5},
        ])
        InventoryLedgerService.adjust_stock(other_lot.id, -2, "Damaged")

        with self.assertRaises(InsufficientStockError):
            OrderPipelineService.confirm_order(order["id"], self.distributor.id)

        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 10)
        self.assertFalse(
            StockMovement.objects.filter(movement_type=StockMovement.MovementType.OUTBOUND).exists()
        )
        self.assertEqual(Order.objects.get(id=order["id"]).status, Order.Status.DRAFT)

    def test_confirm_is_scoped_to_distributor(self):
        order = self.create([{"sku": "AR-001", "quantity": 1}])
        other = make_distributor("Lácteos del Sur")

        with self.assertRaises(NotFoundError):
            OrderPipelineService.confirm_order(order["id"], other.id)


class StatusTransitionTests(PipelineTestCase):
    def setUp(self):
        super().setUp()
        self.order = self.create([{"sku": "AR-001", "quantity": 4}])

    def advance(self, status):
        return OrderPipelineService.update_order_status(self.order["id"], status, self.distributor.id)

    def test_full_lifecycle(self):
        self.advance("CONFIRMED")
        self.advance("IN_PREPARATION")
        result = self.advance("DELIVERED")

        self.assertEqual(result["order"]["status"], "DELIVERED")

    def test_delivered_is_terminal(self):
        for status in ("CONFIRMED", "IN_PREPARATION", "DELIVERED"):
            self.advance(status)

        with self.assertRaises(InvalidTransitionError):
            self.advance("DRAFT")
        with self.assertRaises(InvalidTransitionError):
            self.advance("CANCELLED")

    def test_order_in_preparation_cannot_be_cancelled(self):
        self.advance("CONFIRMED")
        self.advance("IN_PREPARATION")

        with self.assertRaises(InvalidTransitionError):
            self.advance("CANCELLED")

        self.assertEqual(Order.objects.get(id=self.order["id"]).status, Order.Status.IN_PREPARATION)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 6)
        self.assertFalse(
            StockMovement.objects.filter(movement_type=StockMovement.MovementType.INBOUND).exists()
        )

    def test_cannot_skip_confirmation(self):
        with self.assertRaises(InvalidTransitionError):
            self.advance("IN_PREPARATION")

    def test_unknown_status(self):
        with self.assertRaises(ValidationError):
            self.advance("SHIPPED")

    def test_cancelling_draft_restocks_nothing(self):
        result = self.advance("CANCELLED")

        self.assertEqual(result["restocked_movements"], 0)
        self.assertFalse(StockMovement.objects.exists())

    def test_cancelling_confirmed_order_returns_stock_to_same_lots(self):
        early = make_lot(self.product, 2, days_to_expiry=3)
        self.advance("CONFIRMED")
        self.lot.refresh_from_db()
        early.refresh_from_db()
        self.assertEqual((early.stock_quantity, self.lot.stock_quantity), (0, 8))

        result = self.advance("CANCELLED")

        self.assertEqual(result["restocked_movements"], 2)
        self.lot.refresh_from_db()
        early.refresh_from_db()
        self.assertEqual((early.stock_quantity, self.lot.stock_quantity), (2, 10))
        inbound = StockMovement.objects.filter(
            order_id=self.order["id"], movement_type=StockMovement.MovementType.INBOUND
        )
        self.assertEqual(inbound.count(), 2)
        self.assertEqual(set(inbound.values_list("reason", flat=True)), {"Order cancelled"})
        self.assertEqual(InventoryLot.objects.count(), 2)


class BulkStatusTests(PipelineTestCase):
    def test_each_order_succeeds_or_fails_on_its_own(self):
        ok = self.create([{"sku": "AR-001", "quantity": 3}])
        too_big = self.create([{"sku": "AR-001", "quantity": 9}])

        result = OrderPipelineService.bulk_update_status(
            [ok["id"], too_big["id"], 999999], "CONFIRMED", self.distributor.id
        )

        self.assertEqual(result["updated"], 1)
        self.assertEqual(result["failed"], 2)
        codes = [r.get("error_code") for r in result["results"]]
        self.assertEqual(codes, [None, "INSUFFICIENT_STOCK", "NOT_FOUND"])

    def test_requires_order_ids(self):
        with self.assertRaises(ValidationError):
            OrderPipelineService.bulk_update_status([], "CONFIRMED", self.distributor.id)


class OrderQueryTests(PipelineTestCase):
    def test_lookup_by_number_and_listing(self):
        order = self.create([{"sku": "AR-001", "quantity": 1}])
        self.create([{"sku": "AR-001", "quantity": 2}])
        OrderPipelineService.confirm_order(order["id"], self.distributor.id)

        found = OrderPipelineService.get_order_by_number(order["order_number"], self.distributor.id)
        confirmed = OrderPipelineService.list_by_distributor(self.distributor.id, status="CONFIRMED")
        everything = OrderPipelineService.list_by_distributor(self.distributor.id)

        self.assertEqual(found["order"]["id"], order["id"])
        self.assertEqual([o["id"] for o in confirmed["orders"]], [order["id"]])
        self.assertEqual(everything["pagination"]["total_items"], 2)

    def test_client_scope_hides_other_clients_orders(self):
        order = self.create([{"sku": "AR-001", "quantity": 1}])
        neighbour = make_customer(self.distributor, name="Mercadito del Barrio")

        with self.assertRaises(NotFoundError):
            OrderPipelineService.get_order_by_id(
                order["id"], distributor_id=self.distributor.id, client_id=neighbour.id
            )
