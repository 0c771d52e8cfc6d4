from unittest import mock

from django.test import TestCase

from stock.models import Product, InventoryLot, StockMovement
from stock.services import CatalogService, normalize_text
from stock.services.base_service import ValidationError
from stock.tests.factories import make_distributor, make_product, make_lot


class NormalizeTextTests(TestCase):
    def test_strips_accents_and_case(self):
        self.assertEqual(normalize_text("  Azúcar MORENA "), "azucar morena")
        self.assertEqual(normalize_text("Ñandú"), "nandu")
        self.assertEqual(normalize_text(None), "")


class SearchStockTests(TestCase):
    def setUp(self):
        self.distributor = make_distributor()
        self.sugar = make_product(self.distributor, "AZ-001", name="Azúcar 1Kg")
        milk = make_product(self.distributor, "LE-001", name="Leche Entera 1L")
        make_product(self.distributor, "LE-002", name="Leche Descremada 1L", is_active=False)
        make_product(self.distributor, "CA-001", name="Café Molido 500g")
        make_lot(self.sugar, 30)
        make_lot(milk, 8, days_to_expiry=10)
        make_lot(milk, 4, days_to_expiry=20)

        other = make_distributor("Lácteos del Sur")
        make_product(other, "AZ-001", name="Azúcar Premium")

    def test_matches_ignoring_accents(self):
        result = CatalogService.search_stock(self.distributor.id, "azucar")

        self.assertEqual(result["count"], 1)
        self.assertEqual(result["products"][0]["sku"], "AZ-001")
        self.assertEqual(result["products"][0]["available_stock"], 30)

    def test_comma_separated_terms_match_any(self):
        result = CatalogService.search_stock(self.distributor.id, "leche, cafe")

        self.assertEqual([p["sku"] for p in result["products"]], ["CA-001", "LE-001"])

    def test_stock_is_summed_across_lots(self):
        result = CatalogService.search_stock(self.distributor.id, "LE-001")

        self.assertEqual(result["products"][0]["available_stock"], 12)

    def test_product_without_lots_reports_zero(self):
        result = CatalogService.search_stock(self.distributor.id, "café")

        self.assertEqual(result["products"][0]["available_stock"], 0)

    def test_inactive_products_are_hidden(self):
        result = CatalogService.search_stock(self.distributor.id, "descremada")

        self.assertEqual(result["count"], 0)

    def test_empty_query_lists_active_catalog_of_one_distributor(self):
        result = CatalogService.search_stock(self.distributor.id, "")

        self.assertEqual(result["count"], 3)
        self.assertNotIn("Azúcar Premium", [p["name"] for p in result["products"]])

    def test_search_columns_follow_name_and_sku(self):
        self.assertEqual((self.sugar.search_name, self.sugar.search_sku), ("azucar 1kg", "az-001"))

        self.sugar.name = "Azúcar Mascabo 1Kg"
        self.sugar.save(update_fields=["name"])

        self.assertEqual(Product.objects.get(id=self.sugar.id).search_name, "azucar mascabo 1kg")
        result = CatalogService.search_stock(self.distributor.id, "MASCABO")
        self.assertEqual([p["sku"] for p in result["products"]], ["AZ-001"])

    def test_products_are_filtered_by_the_database(self):
        with mock.patch(
            "stock.services.catalog_service.normalize_text", wraps=normalize_text
        ) as normalize, self.assertNumQueries(1):
            result = CatalogService.search_stock(self.distributor.id, "leche, cafe")

        self.assertEqual(result["count"], 2)
        self.assertEqual(normalize.call_count, 2)

    def test_term_does_not_span_name_and_sku(self):
        result = CatalogService.search_stock(self.distributor.id, "1kg az")

        self.assertEqual(result["count"], 0)


class CreateProductTests(TestCase):
    def setUp(self):
        self.distributor = make_distributor()

    def test_initial_stock_opens_lot_through_ledger(self):
        result = CatalogService.create_product(
            distributor_id=self.distributor.id,
            sku="YE-001",
            name="Yerba Mate 1Kg",
            base_price="4200",
            initial_stock=50,
            expiration_date="2031-06-30",
        )

        self.assertEqual(result["product"]["available_stock"], 50)
        self.assertEqual(result["lot"]["lot_number"], "YE-001-L1")
        movement = StockMovement.objects.get()
        self.assertEqual(movement.movement_type, StockMovement.MovementType.INBOUND)
        self.assertEqual(movement.reason, "Initial stock")

    def test_without_stock_creates_no_lot(self):
        result = CatalogService.create_product(
            distributor_id=self.distributor.id, sku="YE-002", name="Yerba Suave", base_price="10"
        )

        self.assertIsNone(result["lot"])
        self.assertFalse(InventoryLot.objects.exists())

    def test_duplicate_sku_is_rejected(self):
        make_product(self.distributor, "YE-003")

        with self.assertRaises(ValidationError) as ctx:
            CatalogService.create_product(
                distributor_id=self.distributor.id, sku="YE-003", name="Otra", base_price="1"
            )
        self.assertEqual(ctx.exception.field, "sku")

    def test_initial_stock_requires_expiration_date(self):
        with self.assertRaises(ValidationError):
            CatalogService.create_product(
                distributor_id=self.distributor.id,
                sku="YE-004",
                name="Yerba",
                base_price="1",
                initial_stock=5,
            )
        self.assertFalse(Product.objects.filter(sku="YE-004").exists())

    def test_rejects_negative_price(self):
        with self.assertRaises(ValidationError):
            CatalogService.create_product(
                distributor_id=self.distributor.id, sku="YE-005", name="Yerba", base_price="-1"
            )


class ExpiringLotsTests(TestCase):
    def test_lists_lots_inside_alert_window(self):
        distributor = make_distributor()
        product = make_product(distributor, "QU-001", name="Queso Cremoso")
        make_lot(product, 3, days_to_expiry=7)
        make_lot(product, 9, days_to_expiry=90)
        make_lot(product, 0, days_to_expiry=2)
        make_lot(product, 5, days_to_expiry=-1)

        result = CatalogService.list_expiring(distributor.id, days=30)

        self.assertEqual(result["count"], 1)
        self.assertEqual(result["lots"][0]["sku"], "QU-001")
        self.assertEqual(result["lots"][0]["days_to_expiry"], 7)
