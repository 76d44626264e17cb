"""Shared fixtures for the test suites: isolated in-memory stores."""

import os
import sys

from sqlalchemy.orm import sessionmaker

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from truckceo.data.database import create_tables, make_engine
from truckceo.data.document_store import DocumentStore
from truckceo.schemas.entities import Role, UserProfile

BUSINESS_ID = "biz_test"


def make_store() -> DocumentStore:
    """A fresh DocumentStore over its own in-memory SQLite database."""
    engine = make_engine("sqlite://")
    create_tables(bind=engine)
    return DocumentStore(sessionmaker(bind=engine, autoflush=False, autocommit=False))


def owner_profile(business_id: str = BUSINESS_ID) -> UserProfile:
    return UserProfile(email="owner@example.com", display_name="Owner", role=Role.OWNER, business_id=business_id)


def member_profile(employee_id, business_id: str = BUSINESS_ID) -> UserProfile:
    return UserProfile(email="driver@example.com", display_name="Driver", role=Role.MEMBER,
                       business_id=business_id, employee_id=employee_id)


def product_data(**overrides):
    data = {"name": "Classic Hamburger Buns (8pk)", "category": "buns",
            "currentInventory": 45, "lastOrderQuantity": 120}
    data.update(overrides)
    return data


def employee_data(**overrides):
    data = {"name": "Andres", "role": "driver", "hoursThisWeek": 38.5, "engagementScore": 85,
            "status": "active", "salesHistory": [{"month": "Jan", "amount": 12400}],
            "attendance": [], "vacationDaysUsed": 2, "sickDaysUsed": 4}
    data.update(overrides)
    return data


def truck_data(**overrides):
    data = {"plate": "GMC-06-01", "type": "2006 GMC 16ft Box", "mileage": 142000,
            "lastService": "2024-03-15", "healthStatus": "good", "issues": [],
            "maintenanceHistory": [{"date": "2024-03-15", "service": "Oil Change & Filter",
                                    "cost": 120, "provider": "Main St Auto"}],
            "registrationExpiry": "2024-12-31", "insuranceExpiry": "2024-09-15",
            "dimensions": {"height": 11.5, "length": 24, "weight": 14500},
            "upkeep": {"tires": 85, "oil": 90, "brakes": 75}}
    data.update(overrides)
    return data


def sale_alert_data(**overrides):
    data = {"storeName": "Walmart Milford", "promoType": "BOGO Hamburger Buns",
            "date": "July 1st", "contactName": "Steve"}
    data.update(overrides)
    return data
