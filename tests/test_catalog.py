"""
Tests for the product catalog and the most-added aggregation
"""
import unittest

import mongomock
from bson import ObjectId
from pydantic import ValidationError as SchemaError

import catalog
from errors import DuplicateSku, NotFound, ValidationError
from models_mongo import serialize_product
from schemas import ProductCreate
from tests.factories import TestDataFactory


class ProductSchemaTests(unittest.TestCase):
    """Field rules applied before anything reaches the catalog"""

    def test_negative_quantity_rejected(self):
        with self.assertRaises(SchemaError):
            ProductCreate(**TestDataFactory.product_fields(quantity=-1))

    def test_non_positive_price_rejected(self):
        for price in (0, -5.5):
            with self.assertRaises(SchemaError):
                ProductCreate(**TestDataFactory.product_fields(price=price))

    def test_non_finite_price_rejected(self):
        for price in (float("inf"), float("nan")):
            with self.assertRaises(SchemaError):
                ProductCreate(**TestDataFactory.product_fields(price=price))

    def test_quantity_beyond_int64_rejected(self):
        with self.assertRaises(SchemaError):
            ProductCreate(**TestDataFactory.product_fields(quantity=2**63))

    def test_unknown_type_rejected(self):
        with self.assertRaises(SchemaError):
            ProductCreate(**TestDataFactory.product_fields(type="Spaceships"))

    def test_blank_sku_rejected(self):
        with self.assertRaises(SchemaError):
            ProductCreate(**TestDataFactory.product_fields(sku="   "))

    def test_image_url_accepts_camel_case(self):
        product = ProductCreate(**TestDataFactory.product_fields(imageUrl="https://example.com/a.jpg"))
        self.assertEqual(product.image_url, "https://example.com/a.jpg")


class CreateProductTests(unittest.TestCase):

    def setUp(self):
        self.products = TestDataFactory.collections().products

    def test_create_returns_stored_record(self):
        """Created product comes back with a generated id"""
        product = TestDataFactory.create_product(self.products, sku="LAP-001", quantity=0)

        self.assertTrue(ObjectId.is_valid(product["id"]))
        self.assertEqual(product["sku"], "LAP-001")
        self.assertEqual(product["quantity"], 0)
        self.assertEqual(catalog.get_product(self.products, product["id"]), product)

    def test_duplicate_sku_rejected(self):
        """SKU is unique across the catalog"""
        TestDataFactory.create_product(self.products, sku="DUP-1")

        with self.assertRaises(DuplicateSku) as ctx:
            TestDataFactory.create_product(self.products, sku="DUP-1", name="Something else")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertIn("DUP-1", ctx.exception.message)
        self.assertEqual(self.products.count_documents({}), 1)


class ListProductsTests(unittest.TestCase):

    def setUp(self):
        self.products = TestDataFactory.collections().products
        self.created = [
            TestDataFactory.create_product(self.products, name=f"Product {i}") for i in range(7)
        ]

    def test_pages_follow_insertion_order(self):
        """skip = (page - 1) * limit over insertion order"""
        first, total = catalog.list_products(self.products, page=1, limit=3)
        second, _ = catalog.list_products(self.products, page=2, limit=3)
        last, _ = catalog.list_products(self.products, page=3, limit=3)

        self.assertEqual(total, 7)
        self.assertEqual([p["id"] for p in first + second + last], [p["id"] for p in self.created])
        self.assertEqual(len(last), 1)

    def test_page_past_the_end_is_empty(self):
        items, total = catalog.list_products(self.products, page=5, limit=3)
        self.assertEqual(items, [])
        self.assertEqual(total, 7)

    def test_listing_is_idempotent(self):
        """Same page twice with no writes in between gives the same answer"""
        self.assertEqual(
            catalog.list_products(self.products, page=2, limit=2),
            catalog.list_products(self.products, page=2, limit=2),
        )

    def test_invalid_page_or_limit(self):
        for page, limit in ((0, 10), (1, 0), (-1, -1)):
            with self.assertRaises(ValidationError):
                catalog.list_products(self.products, page=page, limit=limit)


class UpdateQuantityTests(unittest.TestCase):

    def setUp(self):
        self.products = TestDataFactory.collections().products
        self.product = TestDataFactory.create_product(self.products, quantity=5)

    def test_only_quantity_changes(self):
        """Returned product has the new quantity and everything else untouched"""
        updated = catalog.update_quantity(self.products, self.product["id"], 42)

        expected = dict(self.product, quantity=42)
        self.assertEqual(updated, expected)
        self.assertEqual(catalog.get_product(self.products, self.product["id"]), expected)

    def test_zero_is_allowed(self):
        self.assertEqual(catalog.update_quantity(self.products, self.product["id"], 0)["quantity"], 0)

    def test_unknown_id(self):
        with self.assertRaises(NotFound) as ctx:
            catalog.update_quantity(self.products, str(ObjectId()), 3)
        self.assertEqual(ctx.exception.status_code, 404)

    def test_malformed_id(self):
        with self.assertRaises(NotFound):
            catalog.update_quantity(self.products, "not-an-id", 3)

    def test_bad_quantity(self):
        for quantity in (-1, 2.5, "7", True, None, 10**20):
            with self.assertRaises(ValidationError):
                catalog.update_quantity(self.products, self.product["id"], quantity)
        self.assertEqual(catalog.get_product(self.products, self.product["id"])["quantity"], 5)


class MostAddedTests(unittest.TestCase):
    """Aggregation over raw documents, duplicates allowed (no unique index here)"""

    def setUp(self):
        self.products = mongomock.MongoClient()[f"analytics_{TestDataFactory.random_string()}"]["products"]

    def insert(self, *pairs):
        self.products.insert_many(
            [{"name": name, "sku": sku, "type": "Other", "quantity": 1, "price": 1.0} for name, sku in pairs]
        )

    def test_groups_by_name_and_sku(self):
        self.insert(("A", "1"), ("A", "1"), ("B", "2"))

        self.assertEqual(
            catalog.most_added(self.products),
            [{"_id": {"name": "A", "sku": "1"}, "count": 2}, {"_id": {"name": "B", "sku": "2"}, "count": 1}],
        )

    def test_sorted_descending_and_counts_sum_to_total(self):
        self.insert(("A", "1"), ("B", "2"), ("B", "2"), ("C", "3"), ("C", "3"), ("C", "3"), ("A", "9"))

        result = catalog.most_added(self.products)
        counts = [r["count"] for r in result]
        self.assertEqual(counts, sorted(counts, reverse=True))
        self.assertEqual(sum(counts), self.products.count_documents({}))
        self.assertEqual(result[0]["_id"], {"name": "C", "sku": "3"})

    def test_truncated_to_limit(self):
        self.insert(*[(f"P{i}", str(i)) for i in range(15)])

        self.assertEqual(len(catalog.most_added(self.products)), 10)
        self.assertEqual(len(catalog.most_added(self.products, limit=3)), 3)

    def test_empty_catalog(self):
        self.assertEqual(catalog.most_added(self.products), [])


class SerializeProductTests(unittest.TestCase):

    def test_optional_fields_default_to_none(self):
        doc = {"_id": ObjectId(), "name": "Pen", "type": "Other", "sku": "PEN-1", "quantity": 3, "price": 1.5}
        product = serialize_product(doc)
        self.assertEqual(product["id"], str(doc["_id"]))
        self.assertIsNone(product["image_url"])
        self.assertIsNone(product["description"])
        self.assertNotIn("_id", product)
