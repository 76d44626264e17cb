#!/usr/bin/env python3
"""
Account Service Test Suite

PURPOSE:
    Verifies owner registration and team member linking on top of the
    document store.

TEST COVERAGE:
    - Registration creates business, profile and demo data
    - Repeated registration is a no-op
    - Linking a login to an employee record
"""

import unittest

from helpers import make_store
from truckceo.data.accounts import AccountService
from truckceo.data.errors import DocumentNotFoundError
from truckceo.data.gateway import PersistenceGateway
from truckceo.schemas.entities import Role


class TestRegisterOwner(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.accounts = AccountService(self.store)

    def test_register_creates_business_and_profile(self):
        profile = self.accounts.register_owner("uid-1", "chris@example.com", "Chris Mateo")

        self.assertEqual(profile.role, Role.OWNER)
        self.assertEqual(profile.business_id, "biz_uid-1")
        business = self.accounts.get_business("biz_uid-1")
        self.assertEqual(business.name, "Chris Mateo's Business")
        self.assertEqual(business.owner_id, "uid-1")
        self.assertEqual(business.subscription, "free")

        stored = self.store.get("users/uid-1")
        self.assertEqual(stored["businessId"], "biz_uid-1")
        self.assertEqual(stored["role"], "business_owner")
        self.assertIn("createdAt", stored)

    def test_register_seeds_demo_data(self):
        self.accounts.register_owner("uid-1", "chris@example.com")
        gateway = PersistenceGateway("biz_uid-1", self.store)
        self.assertEqual(len(gateway.products.get_all()), 5)
        self.assertEqual(len(gateway.routes.get_all()), 6)
        self.assertEqual(self.accounts.get_business("biz_uid-1").name, "Business Owner's Business")

    def test_register_without_seed(self):
        self.accounts.register_owner("uid-2", None, seed_demo=False)
        self.assertEqual(PersistenceGateway("biz_uid-2", self.store).products.get_all(), [])

    def test_register_is_idempotent(self):
        first = self.accounts.register_owner("uid-1", "chris@example.com", "Chris")
        PersistenceGateway("biz_uid-1", self.store).products.delete("1")

        second = self.accounts.register_owner("uid-1", "other@example.com", "Someone Else")

        self.assertEqual(second, first)
        # Demo data is not re-seeded
        self.assertIsNone(PersistenceGateway("biz_uid-1", self.store).products.get_one("1"))

    def test_unknown_profile(self):
        self.assertIsNone(self.accounts.get_profile("nobody"))
        self.assertIsNone(self.accounts.get_business("biz_nobody"))


class TestLinkTeamMember(unittest.TestCase):

    def setUp(self):
        self.store = make_store()
        self.accounts = AccountService(self.store)
        self.owner = self.accounts.register_owner("owner-1", "chris@example.com", "Chris")

    def test_link_member(self):
        profile = self.accounts.link_team_member(
            "uid-andres", "andres@example.com", "Andres", self.owner.business_id, "driver-1")

        self.assertEqual(profile.role, Role.MEMBER)
        self.assertEqual(profile.employee_id, "driver-1")
        self.assertEqual(self.accounts.get_profile("uid-andres"), profile)

        employee = PersistenceGateway(self.owner.business_id, self.store).employees.get_one("driver-1")
        self.assertEqual(employee.user_id, "uid-andres")
        self.assertEqual(employee.email, "andres@example.com")

    def test_link_missing_employee(self):
        with self.assertRaises(DocumentNotFoundError):
            self.accounts.link_team_member("uid-x", None, "X", self.owner.business_id, "driver-99")
        self.assertIsNone(self.accounts.get_profile("uid-x"))


if __name__ == "__main__":
    unittest.main()
