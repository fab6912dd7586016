import unittest

from shopsync.pipeline.transforms import transform_customer, transform_order, transform_product, external_key
from shopsync.utils import gid_tail, normalize_store_host

from fakes import customer_node, order_node, product_node


class CustomerTransformTests(unittest.TestCase):
    def test_full_record(self):
        rec = transform_customer(customer_node(42), "acct-1", "int-1")
        self.assertEqual(rec["customer_id"], "42")
        self.assertEqual(rec["account_id"], "acct-1")
        self.assertEqual(rec["integration_id"], "int-1")
        self.assertEqual(rec["full_name"], "Ana Lee")
        self.assertEqual(rec["location"], {"city": "Austin", "country": "United States", "timezone": None, "state": "Texas"})
        self.assertEqual(rec["total_value"], 0)
        self.assertEqual(rec["status"], "new")
        self.assertEqual(rec["engagement_score"], 10)
        self.assertEqual(rec["last_activity"], "2024-05-01T10:00:00Z")

    def test_name_joining(self):
        self.assertEqual(transform_customer(customer_node(1, "Ana", ""), "a", "j")["full_name"], "Ana")
        self.assertEqual(transform_customer(customer_node(1, "", ""), "a", "j")["full_name"], "")
        self.assertEqual(transform_customer(customer_node(1, None, "Lee"), "a", "j")["full_name"], "Lee")

    def test_no_default_address(self):
        self.assertIsNone(transform_customer(customer_node(1, address=False), "a", "j")["location"])

    def test_same_input_same_output(self):
        node = customer_node(7)
        self.assertEqual(transform_customer(node, "a", "j"), transform_customer(node, "a", "j"))

    def test_missing_id_skipped(self):
        self.assertIsNone(transform_customer({"firstName": "x"}, "a", "j"))
        self.assertIsNone(transform_customer(None, "a", "j"))


class OrderTransformTests(unittest.TestCase):
    def test_interaction_fields(self):
        rec = transform_order(order_node(5, customer=9, amount="45.50", items=(("Mug", 2), ("Tea", 1))), "acct-1", "int-1")
        self.assertEqual(rec["interaction_type"], "purchase")
        self.assertEqual(rec["customer_id"], "9")
        self.assertEqual(rec["title"], "Shopify Order #1005")
        self.assertEqual(rec["description"], "Online store purchase with 2 item(s): 2x Mug, 1x Tea.")
        self.assertEqual(rec["value"], 45.5)
        self.assertEqual(rec["metadata"], {"order_id": "5", "order_name": "#1005"})
        self.assertEqual(rec["line_items"][0], {"title": "Mug", "quantity": 2, "price": 10.0})

    def test_missing_total_defaults_to_zero(self):
        node = order_node(5)
        node["totalPriceSet"] = None
        self.assertEqual(transform_order(node, "a", "j")["value"], 0)

    def test_order_without_customer_skipped(self):
        self.assertIsNone(transform_order(order_node(5, customer=None), "a", "j"))

    def test_same_input_same_output(self):
        node = order_node(3)
        self.assertEqual(transform_order(node, "a", "j"), transform_order(node, "a", "j"))


class ProductTransformTests(unittest.TestCase):
    def test_first_variant_only(self):
        node = product_node(8, variants=(("19.99", "24.99", 3), ("5.00", None, 100)))
        rec = transform_product(node, "acct-1", "int-1")
        self.assertEqual(rec["product_id"], "8")
        self.assertEqual(rec["price"], 19.99)
        self.assertEqual(rec["compare_at_price"], 24.99)
        self.assertEqual(rec["inventory_quantity"], 3)
        self.assertEqual(rec["variants_count"], 2)
        self.assertEqual(rec["status"], "active")
        self.assertEqual(rec["description"], "")

    def test_no_variant_and_defaults(self):
        rec = transform_product(product_node(8, variants=(), tags=None), "a", "j")
        self.assertEqual(rec["price"], 0)
        self.assertEqual(rec["compare_at_price"], 0)
        self.assertEqual(rec["tags"], [])
        self.assertEqual(rec["images"], ["https://cdn.example.com/8.png"])

    def test_missing_compare_at_price(self):
        rec = transform_product(product_node(8, variants=(("10", None, None),)), "a", "j")
        self.assertEqual(rec["compare_at_price"], 0)
        self.assertEqual(rec["inventory_quantity"], 0)

    def test_same_input_same_output(self):
        node = product_node(8, variants=(("19.99", "24.99", 3),))
        self.assertEqual(transform_product(node, "a", "j"), transform_product(node, "a", "j"))

    def test_external_keys(self):
        self.assertEqual(external_key("Product", transform_product(product_node(8), "a", "j")), {"product_id": "8"})
        self.assertEqual(external_key("Interaction", transform_order(order_node(5), "a", "j")), {"metadata.order_id": "5"})


class HelperTests(unittest.TestCase):
    def test_gid_tail(self):
        self.assertEqual(gid_tail("gid://shopify/Product/123"), "123")
        self.assertEqual(gid_tail("123"), "123")

    def test_normalize_store_host(self):
        self.assertEqual(normalize_store_host("https://demo.myshopify.com/"), "demo.myshopify.com")
        self.assertEqual(normalize_store_host("http://demo.myshopify.com"), "demo.myshopify.com")
        self.assertEqual(normalize_store_host("demo.myshopify.com"), "demo.myshopify.com")


if __name__ == "__main__":
    unittest.main()
