import json

from django.test import TestCase
from django.urls import reverse

from stock.models import InventoryLot
from stock.tests.factories import make_distributor, make_product, make_lot


class StockApiTests(TestCase):
    def setUp(self):
        self.distributor = make_distributor()
        self.product = make_product(self.distributor, "AZ-001", name="Azúcar 1Kg")
        self.lot = make_lot(self.product, 10, lot_number="L-1")
        self.headers = {"HTTP_X_DISTRIBUTOR_ID": str(self.distributor.id)}

    def post_json(self, url, payload):
        return self.client.post(
            url, data=json.dumps(payload), content_type="application/json", **self.headers
        )

    def test_search_requires_distributor_header(self):
        response = self.client.get(reverse("stock:search"), {"q": "azucar"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "tenant_resolution")

    def test_search(self):
        response = self.client.get(reverse("stock:search"), {"q": "azucar"}, **self.headers)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["products"][0]["available_stock"], 10)

    def test_product_stock_not_found(self):
        response = self.client.get(
            reverse("stock:product-stock", args=["NOPE"]), **self.headers
        )

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "not_found")

    def test_create_product(self):
        response = self.post_json(reverse("stock:product-create"), {
            "sku": "LE-001",
            "name": "Leche Entera 1L",
            "base_price": "950.00",
            "initial_stock": 24,
            "expiration_date": "2031-01-01",
        })

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["product"]["available_stock"], 24)

    def test_intake_adds_to_lot(self):
        response = self.post_json(reverse("stock:intake"), {
            "sku": "AZ-001", "quantity": 5, "lot_number": "L-1",
        })

        self.assertEqual(response.status_code, 201)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 15)

    def test_adjust_below_zero_is_conflict(self):
        response = self.post_json(
            reverse("stock:lot-adjust", args=[self.lot.id]), {"delta": -11, "reason": "Recount"}
        )

        self.assertEqual(response.status_code, 409)
        error = response.json()["error"]
        self.assertEqual(error["code"], "insufficient_stock")
        self.assertEqual(error["details"]["available"], 10)
        self.assertEqual(InventoryLot.objects.get(id=self.lot.id).stock_quantity, 10)

    def test_movements_list(self):
        self.post_json(reverse("stock:lot-adjust", args=[self.lot.id]), {"delta": -2, "reason": "Recount"})

        response = self.client.get(
            reverse("stock:movement-list"), {"type": "ADJUSTMENT"}, **self.headers
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["movements"][0]["quantity"], -2)
