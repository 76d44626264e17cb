#!/usr/bin/env python3
"""
API Test Suite

PURPOSE:
    Drives the FastAPI application through TestClient with all services
    wired to an in-memory store, a temporary blob directory, in-memory chat
    history and the local fallback assistant.

TEST COVERAGE:
    - Owner sign-in, data listing and generic collection CRUD
    - Error mapping (404 / 409 / 422)
    - Embedded store endpoints
    - CSV upload through multipart form data
    - Team member sessions only see their assigned routes
    - Assistant endpoints in fallback mode

USAGE:
    Run from project root: python -m pytest tests/test_api.py -v
"""

import inspect
import shutil
import tempfile
import unittest

from fastapi.testclient import TestClient

from helpers import make_store
from truckceo.agents.fallback_agent import UNAVAILABLE_CHAT, FallbackAssistant
from truckceo.app.main import Services, app, get_services, upload_csv
from truckceo.app.session import SessionManager
from truckceo.data.accounts import AccountService
from truckceo.data.blob_storage import LocalBlobStorage
from truckceo.sync.context import SyncContextRegistry


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.blob_dir = tempfile.mkdtemp()
        store = make_store()
        self.services = Services(
            store=store,
            accounts=AccountService(store),
            contexts=SyncContextRegistry(store),
            blob_storage=LocalBlobStorage(self.blob_dir),
            sessions=SessionManager(use_redis=False),
            assistant=FallbackAssistant(),
        )
        app.dependency_overrides[get_services] = lambda: self.services
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        shutil.rmtree(self.blob_dir, ignore_errors=True)

    def open_owner_session(self, uid="owner-1"):
        response = self.client.post("/session", json={"uid": uid, "email": "chris@example.com",
                                                      "displayName": "Chris Mateo"})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()


class TestOwnerFlow(ApiTestCase):

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "healthy"})

    def test_first_sign_in_registers_and_seeds(self):
        body = self.open_owner_session()
        self.assertEqual(body["businessId"], "biz_owner-1")
        self.assertEqual(body["role"], "business_owner")
        self.assertEqual(body["counts"]["products"], 5)
        self.assertEqual(body["counts"]["trucks"], 6)

        data = self.client.get(f"/session/{body['sessionId']}/data").json()
        self.assertEqual(data["state"], "ready")
        self.assertEqual(len(data["saleAlerts"]), 3)
        self.assertIn("currentInventory", data["products"][0])

    def test_add_update_delete_product(self):
        sid = self.open_owner_session()["sessionId"]

        created = self.client.post(f"/session/{sid}/products", json={
            "name": "Rye Loaf", "category": "bread", "currentInventory": 4, "lastOrderQuantity": 12})
        self.assertEqual(created.status_code, 200, created.text)
        product_id = created.json()["id"]

        response = self.client.patch(f"/session/{sid}/products/{product_id}", json={"currentInventory": 9})
        self.assertEqual(response.status_code, 200)
        products = {p["id"]: p for p in self.client.get(f"/session/{sid}/data").json()["products"]}
        self.assertEqual(products[product_id]["currentInventory"], 9)

        self.assertEqual(self.client.delete(f"/session/{sid}/products/{product_id}").status_code, 200)
        products = self.client.get(f"/session/{sid}/data").json()["products"]
        self.assertNotIn(product_id, [p["id"] for p in products])

    def test_sale_alert_collection_route(self):
        sid = self.open_owner_session()["sessionId"]
        response = self.client.post(f"/session/{sid}/sale-alerts", json={
            "storeName": "Costco Milford", "promoType": "Bulk Buns", "date": "Aug 2nd"})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(len(self.client.get(f"/session/{sid}/data").json()["saleAlerts"]), 4)

    def test_error_mapping(self):
        sid = self.open_owner_session()["sessionId"]

        self.assertEqual(self.client.get("/session/nope/data").status_code, 404)
        self.assertEqual(self.client.post(f"/session/{sid}/widgets", json={}).status_code, 404)
        self.assertEqual(self.client.patch(f"/session/{sid}/trucks/t99", json={"mileage": 1}).status_code, 404)

        invalid = self.client.patch(f"/session/{sid}/employees/driver-1", json={"engagementScore": 150})
        self.assertEqual(invalid.status_code, 422)
        unknown = self.client.patch(f"/session/{sid}/trucks/t1", json={"colour": "red"})
        self.assertEqual(unknown.status_code, 422)

    def test_embedded_store_endpoints(self):
        sid = self.open_owner_session()["sessionId"]

        created = self.client.post(f"/session/{sid}/routes/ct-1/stores",
                                   json={"name": "Target Milford", "address": "1365 Boston Post Rd"})
        self.assertEqual(created.status_code, 200, created.text)
        store_id = created.json()["id"]

        self.client.patch(f"/session/{sid}/routes/ct-1/stores/{store_id}", json={"address": "1 New Rd"})
        routes = {r["id"]: r for r in self.client.get(f"/session/{sid}/data").json()["routes"]}
        self.assertEqual(routes["ct-1"]["stores"][-1], {"id": store_id, "name": "Target Milford",
                                                        "address": "1 New Rd"})

        self.client.delete(f"/session/{sid}/routes/ct-1/stores/ct-s1")
        routes = {r["id"]: r for r in self.client.get(f"/session/{sid}/data").json()["routes"]}
        self.assertEqual([s["id"] for s in routes["ct-1"]["stores"]], ["ct-s2", store_id])

        missing = self.client.post(f"/session/{sid}/routes/nope/stores", json={"name": "X"})
        self.assertEqual(missing.status_code, 404)

    def test_csv_upload(self):
        sid = self.open_owner_session()["sessionId"]
        content = b"route_name,store_name,address\nCT: Stratford - Flowers,Big Y Stratford,3 Main St\n"

        response = self.client.post(f"/session/{sid}/csv/stores",
                                    files={"file": ("stores.csv", content, "text/csv")})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["recordsProcessed"], 1)
        self.assertTrue(response.json()["success"])
        routes = {r["id"]: r for r in self.client.get(f"/session/{sid}/data").json()["routes"]}
        self.assertEqual(routes["ct-2"]["stores"][-1]["name"], "Big Y Stratford")

    def test_csv_upload_runs_in_worker_thread(self):
        # A plain def handler is run off the event loop by FastAPI
        self.assertFalse(inspect.iscoroutinefunction(upload_csv))

        sid = self.open_owner_session()["sessionId"]
        content = b"Product Name,Category,Current Inventory,Order Quantity\nCountry Loaf,bread,10,30\nBad Row,buns,lots,1\n"
        response = self.client.post(f"/session/{sid}/csv/products",
                                    files={"file": ("products.csv", content, "text/csv")})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["recordsProcessed"], 1)
        names = [p["name"] for p in self.client.get(f"/session/{sid}/data").json()["products"]]
        self.assertIn("Country Loaf", names)
        self.assertEqual(len(names), 6)

    def test_close_session(self):
        sid = self.open_owner_session()["sessionId"]
        self.assertEqual(self.client.delete(f"/session/{sid}").status_code, 200)
        self.assertEqual(self.client.get(f"/session/{sid}/data").status_code, 404)


class TestMemberFlow(ApiTestCase):

    def test_member_sees_only_assigned_routes(self):
        owner = self.open_owner_session()
        self.client.patch(f"/session/{owner['sessionId']}/employees/driver-1",
                          json={"assignedRoutes": ["ct-1", "ct-4"]})
        self.services.accounts.link_team_member(
            "uid-andres", "andres@example.com", "Andres", owner["businessId"], "driver-1")

        response = self.client.post("/session", json={"uid": "uid-andres"})
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["role"], "team_member")
        self.assertEqual(body["businessId"], owner["businessId"])

        data = self.client.get(f"/session/{body['sessionId']}/data").json()
        self.assertEqual(sorted(r["id"] for r in data["routes"]), ["ct-1", "ct-4"])
        self.assertEqual([e["id"] for e in data["employees"]], ["driver-1"])
        self.assertEqual(data["trucks"], [])
        self.assertEqual(data["saleAlerts"], [])
        self.assertEqual(len(data["products"]), 5)


class TestAssistantEndpoints(ApiTestCase):

    def test_suggestions_in_demo_mode(self):
        sid = self.open_owner_session()["sessionId"]
        response = self.client.post(f"/session/{sid}/assistant/suggestions", json={"currentDate": "2024-06-28"})
        self.assertEqual(response.status_code, 200, response.text)
        suggestions = response.json()
        self.assertEqual(len(suggestions), 3)
        self.assertEqual([s["impactLevel"] for s in suggestions], ["high", "medium", "low"])

    def test_chat_records_history(self):
        sid = self.open_owner_session()["sessionId"]
        response = self.client.post(f"/session/{sid}/assistant/chat", json={"message": "Hi"})
        self.assertEqual(response.json()["text"], UNAVAILABLE_CHAT)
        self.assertEqual([m["role"] for m in self.services.sessions.get_history(sid)], ["user", "agent"])

    def test_route(self):
        sid = self.open_owner_session()["sessionId"]
        response = self.client.post(f"/session/{sid}/assistant/route", json={
            "origin": "Yonkers, NY", "destination": "Milford, CT", "truckId": "t6"})
        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["distance"], "Calculating...")

        missing = self.client.post(f"/session/{sid}/assistant/route", json={
            "origin": "A", "destination": "B", "truckId": "t99"})
        self.assertEqual(missing.status_code, 404)


if __name__ == "__main__":
    unittest.main()
