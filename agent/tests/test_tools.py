import json

from django.test import TestCase

from agent.context import ToolContext
from agent.tools import TOOLS, TOOLSETS, invoke_tool, tool_definitions
from orders.models import Order
from stock.tests.factories import (
    make_distributor, make_salesperson, make_customer, make_product, make_lot,
)


class ToolTestCase(TestCase):
    def setUp(self):
        self.distributor = make_distributor()
        self.salesperson = make_salesperson(self.distributor)
        self.customer = make_customer(self.distributor, name="Almacén La Esquina")
        self.other_customer = make_customer(self.distributor, name="Supermercado Don Pepe")
        self.lot = make_lot(make_product(self.distributor, "AZ-001", name="Azúcar 1Kg"), 30)

        self.seller = ToolContext(
            distributor_id=self.distributor.id, salesperson_id=self.salesperson.id
        )
        self.consumer = ToolContext(
            distributor_id=self.distributor.id, client_id=self.customer.id
        )


class ToolRegistryTests(ToolTestCase):
    def test_toolsets(self):
        self.assertEqual(self.seller.toolset, "salesperson")
        self.assertEqual(self.consumer.toolset, "consumer")
        self.assertNotIn("confirmarOrden", TOOLSETS["consumer"])
        for names in TOOLSETS.values():
            for name in names:
                self.assertIn(name, TOOLS)

    def test_definitions_are_self_contained_function_specs(self):
        definitions = {d["function"]["name"]: d for d in tool_definitions("salesperson")}

        self.assertEqual(set(definitions), set(TOOLSETS["salesperson"]))
        parameters = definitions["crearOrden"]["function"]["parameters"]
        self.assertNotIn("$defs", json.dumps(parameters))
        self.assertIn("clientId", parameters["properties"])
        self.assertIn("sku", parameters["properties"]["items"]["items"]["properties"])
        self.assertEqual(parameters["required"], ["items"])

    def test_unknown_toolset(self):
        with self.assertRaises(ValueError):
            tool_definitions("admin")


class InvokeToolTests(ToolTestCase):
    def test_consultar_stock(self):
        result = invoke_tool("consultarStock", {"query": "azucar"}, self.seller)

        self.assertTrue(result["success"])
        self.assertEqual(result["products"][0]["available_stock"], 30)

    def test_arguments_may_arrive_as_json_text(self):
        result = invoke_tool("consultarStock", '{"query": "AZ-001"}', self.consumer)

        self.assertTrue(result["success"])
        self.assertEqual(result["count"], 1)

    def test_invalid_json_arguments(self):
        result = invoke_tool("consultarStock", "{query", self.seller)

        self.assertFalse(result["success"])
        self.assertEqual(result["error_code"], "VALIDATION_ERROR")

    def test_schema_violations_are_reported_per_field(self):
        result = invoke_tool("consultarStock", {"query": "", "color": "red"}, self.seller)

        self.assertEqual(result["error_code"], "VALIDATION_ERROR")
        fields = {error["field"] for error in result["details"]["errors"]}
        self.assertEqual(fields, {"query", "color"})

    def test_quantity_must_be_positive(self):
        result = invoke_tool("crearOrden", {
            "clientId": self.customer.id,
            "items": [{"sku": "AZ-001", "quantity": -2}],
        }, self.seller)

        self.assertEqual(result["error_code"], "VALIDATION_ERROR")
        self.assertEqual(result["details"]["errors"][0]["field"], "items.0.quantity")
        self.assertFalse(Order.objects.exists())

    def test_unknown_tool(self):
        result = invoke_tool("borrarTodo", {}, self.seller)

        self.assertFalse(result["success"])
        self.assertEqual(result["error_code"], "UNKNOWN_TOOL")

    def test_consumer_cannot_confirm(self):
        result = invoke_tool("confirmarOrden", {"orderId": 1}, self.consumer)

        self.assertEqual(result["error_code"], "UNKNOWN_TOOL")

    def test_salesperson_order_flow(self):
        created = invoke_tool("crearOrden", {
            "clientId": self.customer.id,
            "items": [{"sku": "AZ-001", "quantity": 4}],
        }, self.seller)
        self.assertTrue(created["success"])
        self.assertEqual(created["order"]["salesperson_id"], self.salesperson.id)

        confirmed = invoke_tool("confirmarOrden", {"orderId": created["order"]["id"]}, self.seller)
        fetched = invoke_tool("obtenerOrden", {"orderNumber": created["order"]["order_number"]}, self.seller)

        self.assertEqual(confirmed["order"]["status"], "CONFIRMED")
        self.assertEqual(fetched["order"]["id"], created["order"]["id"])
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.stock_quantity, 26)

    def test_salesperson_must_name_the_client(self):
        result = invoke_tool("crearOrden", {"items": [{"sku": "AZ-001", "quantity": 1}]}, self.seller)

        self.assertEqual(result["error_code"], "TENANT_RESOLUTION_ERROR")
        self.assertFalse(Order.objects.exists())

    def test_business_errors_come_back_as_results(self):
        result = invoke_tool("crearOrden", {
            "clientId": self.customer.id,
            "items": [{"sku": "AZ-001", "quantity": 31}],
        }, self.seller)

        self.assertFalse(result["success"])
        self.assertEqual(result["error_code"], "INSUFFICIENT_STOCK")
        self.assertEqual(result["details"]["available"], 30)

    def test_consumer_orders_for_own_account(self):
        result = invoke_tool("crearPedido", {"items": [{"sku": "AZ-001", "quantity": 2}]}, self.consumer)

        self.assertTrue(result["success"])
        self.assertEqual(result["order"]["client"]["id"], self.customer.id)
        self.assertIsNone(result["order"]["salesperson_id"])

    def test_consumer_cannot_act_for_another_client(self):
        result = invoke_tool("crearPedido", {
            "clientId": self.other_customer.id,
            "items": [{"sku": "AZ-001", "quantity": 2}],
        }, self.consumer)

        self.assertEqual(result["error_code"], "VALIDATION_ERROR")
        self.assertFalse(Order.objects.exists())

    def test_consumer_only_sees_own_orders(self):
        theirs = invoke_tool("crearOrden", {
            "clientId": self.other_customer.id,
            "items": [{"sku": "AZ-001", "quantity": 1}],
        }, self.seller)

        result = invoke_tool("obtenerPedido", {"orderId": theirs["order"]["id"]}, self.consumer)

        self.assertEqual(result["error_code"], "NOT_FOUND")

    def test_obtener_orden_needs_a_reference(self):
        result = invoke_tool("obtenerOrden", {}, self.seller)

        self.assertEqual(result["error_code"], "VALIDATION_ERROR")

    def test_sugerir_productos_for_consumer(self):
        result = invoke_tool("sugerirProductos", {"topN": 3}, self.consumer)

        self.assertTrue(result["success"])
        self.assertEqual(result["client_id"], self.customer.id)
        self.assertEqual(result["suggestions"][0]["sku"], "AZ-001")

    def test_buscar_clientes(self):
        result = invoke_tool("buscarClientes", {"query": "pepe"}, self.seller)

        self.assertEqual([c["id"] for c in result["clients"]], [self.other_customer.id])
