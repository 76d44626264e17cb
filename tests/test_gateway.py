#!/usr/bin/env python3
"""
Persistence Gateway Test Suite

PURPOSE:
    Verifies the per-entity get_all / get_one / add / update / delete contract
    against an in-memory document store.

TEST COVERAGE:
    - Store-generated ids and field round-trips on add
    - Partial updates touch only the named fields
    - Deletes are hard and idempotent
    - Validation happens before anything is written
    - Employee defaults and member route filtering
    - Tenant isolation
"""

import unittest

from pydantic import ValidationError

from helpers import (
    BUSINESS_ID,
    employee_data,
    make_store,
    product_data,
    sale_alert_data,
    truck_data,
)
from truckceo.data.errors import ConfigurationError, DocumentNotFoundError, InvalidPathError
from truckceo.data.gateway import PersistenceGateway
from truckceo.schemas.entities import Product, ProductCategory


class TestGatewayCrud(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.gateway = PersistenceGateway(BUSINESS_ID, self.store)

    def test_requires_business_id(self):
        with self.assertRaises(ConfigurationError):
            PersistenceGateway("", self.store)

    def test_add_then_get_all_returns_one_new_record(self):
        cases = [
            (self.gateway.products, product_data()),
            (self.gateway.trucks, truck_data()),
            (self.gateway.sale_alerts, sale_alert_data()),
            (self.gateway.routes, {"name": "CT: Milford - Flowers",
                                   "stores": [{"id": "ct-s1", "name": "Costco Milford",
                                               "address": "1718 Boston Post Rd"}]}),
        ]
        for collection, data in cases:
            with self.subTest(collection=collection.name):
                before = collection.get_all()
                new_id = collection.add(data)
                after = collection.get_all()

                self.assertEqual(len(after), len(before) + 1)
                created = [e for e in after if e.id == new_id]
                self.assertEqual(len(created), 1)
                stored = created[0].to_document()
                for key, value in data.items():
                    self.assertEqual(stored[key], value)

    def test_add_ignores_caller_supplied_id(self):
        new_id = self.gateway.products.add(product_data(id="my-own-id"))
        self.assertNotEqual(new_id, "my-own-id")
        self.assertIsNone(self.gateway.products.get_one("my-own-id"))
        self.assertIsNotNone(self.gateway.products.get_one(new_id))

    def test_add_accepts_model_instances(self):
        product = Product(name="Rye Loaf", category=ProductCategory.bread, current_inventory=3)
        new_id = self.gateway.products.add(product)
        self.assertEqual(self.gateway.products.get_one(new_id).name, "Rye Loaf")

    def test_get_one_missing_returns_none(self):
        self.assertIsNone(self.gateway.trucks.get_one("nope"))

    def test_update_changes_only_named_fields(self):
        truck_id = self.gateway.trucks.add(truck_data())
        before = self.store.get(f"businesses/{BUSINESS_ID}/trucks/{truck_id}")

        self.gateway.trucks.update(truck_id, {"mileage": 150000, "healthStatus": "warning"})

        after = self.store.get(f"businesses/{BUSINESS_ID}/trucks/{truck_id}")
        self.assertEqual(after["mileage"], 150000)
        self.assertEqual(after["healthStatus"], "warning")
        for key in before:
            if key not in ("mileage", "healthStatus"):
                self.assertEqual(after[key], before[key], key)

    def test_update_accepts_attribute_names(self):
        product_id = self.gateway.products.add(product_data())
        self.gateway.products.update(product_id, {"last_order_quantity": 200})
        self.assertEqual(self.gateway.products.get_one(product_id).last_order_quantity, 200)

    def test_update_missing_document_raises(self):
        with self.assertRaises(DocumentNotFoundError):
            self.gateway.products.update("missing", {"currentInventory": 1})

    def test_update_rejects_unknown_field_without_writing(self):
        product_id = self.gateway.products.add(product_data())
        with self.assertRaises(ValidationError):
            self.gateway.products.update(product_id, {"currentInventory": 5, "colour": "brown"})
        self.assertEqual(self.gateway.products.get_one(product_id).current_inventory, 45)

    def test_update_rejects_out_of_range_values(self):
        employee_id = self.gateway.employees.add(employee_data())
        with self.assertRaises(ValidationError):
            self.gateway.employees.update(employee_id, {"engagementScore": 101})
        with self.assertRaises(ValidationError):
            self.gateway.employees.update(employee_id, {"hoursThisWeek": -1})
        self.assertEqual(self.gateway.employees.get_one(employee_id).engagement_score, 85)

    def test_update_rejects_duplicate_store_ids(self):
        route_id = self.gateway.routes.add({"name": "NY Route"})
        stores = [{"id": "s1", "name": "A", "address": ""}, {"id": "s1", "name": "B", "address": ""}]
        with self.assertRaises(ValidationError):
            self.gateway.routes.update(route_id, {"stores": stores})

    def test_add_rejects_invalid_payload(self):
        with self.assertRaises(ValidationError):
            self.gateway.trucks.add(truck_data(dimensions={"height": 0, "length": 24, "weight": 14500}))
        self.assertEqual(self.gateway.trucks.get_all(), [])

    def test_delete_then_get_one_is_absent(self):
        alert_id = self.gateway.sale_alerts.add(sale_alert_data())
        self.gateway.sale_alerts.delete(alert_id)
        self.assertIsNone(self.gateway.sale_alerts.get_one(alert_id))

    def test_delete_nonexistent_does_not_raise(self):
        self.gateway.sale_alerts.delete("never-existed")

    def test_ids_with_slashes_are_rejected(self):
        with self.assertRaises(InvalidPathError):
            self.gateway.products.get_one("a/b")

    def test_route_store_array_rewrite_is_idempotent(self):
        stores = [
            {"id": "ct-s1", "name": "Costco Milford", "address": "1718 Boston Post Rd"},
            {"id": "ct-s2", "name": "Walmart Milford", "address": "900 Boston Post Rd"},
        ]
        route_id = self.gateway.routes.add({"name": "CT: Milford - Flowers", "stores": stores})

        self.gateway.routes.update(route_id, {"stores": stores})
        self.gateway.routes.update(route_id, {"stores": stores})

        stored = self.store.get(f"businesses/{BUSINESS_ID}/routes/{route_id}")["stores"]
        self.assertEqual(stored, stores)

    def test_tenants_are_isolated(self):
        other = PersistenceGateway("biz_other", self.store)
        self.gateway.products.add(product_data())
        self.assertEqual(other.products.get_all(), [])


class TestEmployeeAndRoutes(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.gateway = PersistenceGateway(BUSINESS_ID, self.store)

    def test_employee_add_defaults_account_fields(self):
        employee_id = self.gateway.employees.add(employee_data())
        raw = self.store.get(f"businesses/{BUSINESS_ID}/employees/{employee_id}")
        self.assertIsNone(raw["userId"])
        self.assertIsNone(raw["email"])
        self.assertEqual(raw["assignedRoutes"], [])

    def test_employee_add_with_account_fields(self):
        employee_id = self.gateway.employees.add(
            employee_data(), user_id="uid-7", email="andres@example.com", assigned_routes=["r1"]
        )
        employee = self.gateway.employees.get_one(employee_id)
        self.assertEqual(employee.user_id, "uid-7")
        self.assertEqual(employee.email, "andres@example.com")
        self.assertEqual(employee.assigned_routes, ["r1"])

    def test_routes_for_member(self):
        for route_id in ("r1", "r2", "r3"):
            self.store.set(f"businesses/{BUSINESS_ID}/routes/{route_id}", {"name": route_id.upper(), "stores": []})

        routes = self.gateway.get_routes_for_member(["r1", "r3", "gone"])
        self.assertEqual(sorted(r.id for r in routes), ["r1", "r3"])
        self.assertEqual(self.gateway.get_routes_for_member([]), [])


if __name__ == "__main__":
    unittest.main()
