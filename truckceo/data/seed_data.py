"""Demo dataset written into every newly registered business."""
import copy
from typing import Any, Dict, List

from .document_store import DocumentStore
from .gateway import EMPLOYEES, PRODUCTS, ROUTES, SALE_ALERTS, TRUCKS, business_path
from ..utils.logger import get_logger

logger = get_logger()

ROUTES_SEED: List[Dict[str, Any]] = [
    {"id": "ny-1", "name": "NY: Yonkers - Bimbo", "stores": [
        {"id": "ny-s1", "name": "Stop & Shop Yonkers", "address": "111 Vredenburgh Ave"},
        {"id": "ny-s2", "name": "ShopRite of Greenway Plaza", "address": "25-43 Prospect St"},
    ]},
    {"id": "ny-2", "name": "NY: Ossining - Bimbo", "stores": [
        {"id": "ny-s3", "name": "ACME Markets Ossining", "address": "202 S Highland Ave"},
    ]},
    {"id": "ct-1", "name": "CT: Milford - Flowers", "stores": [
        {"id": "ct-s1", "name": "Costco Milford", "address": "1718 Boston Post Rd"},
        {"id": "ct-s2", "name": "Walmart Milford", "address": "900 Boston Post Rd"},
    ]},
    {"id": "ct-2", "name": "CT: Stratford - Flowers", "stores": [
        {"id": "ct-s3", "name": "ShopRite Stratford", "address": "250 Barnum Avenue"},
    ]},
    {"id": "ct-3", "name": "CT: Ridgefield - Bimbo", "stores": [
        {"id": "ct-s4", "name": "Stop & Shop Ridgefield", "address": "125 Danbury Rd"},
    ]},
    {"id": "ct-4", "name": "CT: Norwalk - Bimbo", "stores": [
        {"id": "ct-s5", "name": "Stew Leonard's Norwalk", "address": "100 Westport Ave"},
        {"id": "ct-s6", "name": "Whole Foods Norwalk", "address": "350 Connecticut Ave"},
    ]},
]

PRODUCTS_SEED: List[Dict[str, Any]] = [
    {"id": "1", "name": "Classic Hamburger Buns (8pk)", "category": "buns", "currentInventory": 45, "lastOrderQuantity": 120},
    {"id": "2", "name": "Premium Hot Dog Buns (8pk)", "category": "buns", "currentInventory": 32, "lastOrderQuantity": 100},
    {"id": "3", "name": "Whole Wheat Sliced Bread", "category": "bread", "currentInventory": 88, "lastOrderQuantity": 80},
    {"id": "4", "name": "Tastykake Butterscotch Krimpets", "category": "snacks", "currentInventory": 12, "lastOrderQuantity": 40},
    {"id": "5", "name": "Tastykake Chocolate Cupcakes", "category": "snacks", "currentInventory": 15, "lastOrderQuantity": 40},
]

_SALES_HISTORY = [
    {"month": "Jan", "amount": 12400},
    {"month": "Feb", "amount": 13500},
    {"month": "Mar", "amount": 15200},
]

_ATTENDANCE = [
    {"date": "2024-06-10", "lateStart": False, "lateFinish": False, "type": "work"},
    {"date": "2024-06-11", "lateStart": True, "lateFinish": False, "type": "work"},
    {"date": "2024-06-12", "lateStart": False, "lateFinish": True, "type": "work"},
]


def _employee(emp_id, name, role, hours, score, status, vacation, sick):
    return {
        "id": emp_id, "name": name, "role": role, "hoursThisWeek": hours,
        "engagementScore": score, "status": status,
        "salesHistory": copy.deepcopy(_SALES_HISTORY),
        "attendance": copy.deepcopy(_ATTENDANCE),
        "vacationDaysUsed": vacation, "sickDaysUsed": sick,
    }


EMPLOYEES_SEED: List[Dict[str, Any]] = [
    _employee("exec-1", "Chris Mateo", "executive", 45, 100, "active", 12, 2),
    _employee("exec-2", "Virgil Mateo", "executive", 42, 98, "active", 5, 1),
    _employee("exec-3", "Charlotte Mateo", "executive", 40, 99, "active", 8, 0),
    _employee("driver-1", "Andres", "driver", 38.5, 85, "active", 2, 4),
    _employee("driver-2", "Adrian", "driver", 40.0, 82, "active", 4, 2),
    _employee("driver-3", "Ronaldo", "driver", 34.0, 75, "off", 10, 5),
    _employee("driver-4", "Alex", "driver", 39.5, 88, "active", 3, 1),
]

_MAINTENANCE = [
    {"date": "2024-03-15", "service": "Oil Change & Filter", "cost": 120, "provider": "Main St Auto"},
    {"date": "2023-11-20", "service": "New Tires (Front)", "cost": 450, "provider": "Tire Discounters"},
]


def _truck(truck_id, plate, truck_type, mileage, last_service, health, issues,
           registration, insurance, dimensions, upkeep):
    return {
        "id": truck_id, "plate": plate, "type": truck_type, "mileage": mileage,
        "lastService": last_service, "healthStatus": health, "issues": issues,
        "maintenanceHistory": copy.deepcopy(_MAINTENANCE),
        "registrationExpiry": registration, "insuranceExpiry": insurance,
        "dimensions": dimensions, "upkeep": upkeep,
    }


_GMC_16FT = {"height": 11.5, "length": 24, "weight": 14500}

FLEET_SEED: List[Dict[str, Any]] = [
    _truck("t1", "GMC-06-01", "2006 GMC 16ft Box", 142000, "2024-03-15", "good", [],
           "2024-12-31", "2024-09-15", dict(_GMC_16FT), {"tires": 85, "oil": 90, "brakes": 75}),
    _truck("t2", "GMC-06-02", "2006 GMC 16ft Box", 156000, "2024-02-10", "good", [],
           "2024-11-20", "2024-10-01", dict(_GMC_16FT), {"tires": 70, "oil": 60, "brakes": 80}),
    _truck("t3", "GMC-06-03", "2006 GMC 16ft Box", 188000, "2024-01-20", "warning", ["Brake pads thin"],
           "2024-08-15", "2024-07-22", {"height": 12.0, "length": 24, "weight": 15000},
           {"tires": 45, "oil": 30, "brakes": 20}),
    _truck("t4", "GMC-06-04", "2006 GMC 16ft Box", 125000, "2024-05-01", "good", [],
           "2025-01-10", "2024-11-05", dict(_GMC_16FT), {"tires": 95, "oil": 95, "brakes": 90}),
    _truck("t5", "GMC-06-05", "2006 GMC 16ft Box", 195000, "2023-11-15", "critical", ["Transmission slip"],
           "2024-06-25", "2024-06-30", dict(_GMC_16FT), {"tires": 30, "oil": 10, "brakes": 15}),
    _truck("t6", "ISUZU-14", "2014 Isuzu 20ft Box", 85000, "2024-04-05", "good", [],
           "2025-04-15", "2024-08-30", {"height": 13.2, "length": 28, "weight": 19500},
           {"tires": 90, "oil": 85, "brakes": 95}),
]

SALE_ALERTS_SEED: List[Dict[str, Any]] = [
    {"id": "s1", "storeName": "Walmart Milford", "promoType": "BOGO Hamburger Buns", "date": "July 1st", "contactName": "Steve"},
    {"id": "s2", "storeName": "Stew Leonard's Norwalk", "promoType": "20% Off Organic Sliced", "date": "June 28th", "contactName": "Brenda"},
    {"id": "s3", "storeName": "Stop & Shop Yonkers", "promoType": "End Cap Snack Special", "date": "July 10th", "contactName": "Marcus"},
]


def _write_all(store: DocumentStore, collection: str, records: List[Dict[str, Any]], **extra) -> int:
    for record in records:
        data = copy.deepcopy(record)
        doc_id = data.pop("id")
        data.update(extra)
        store.set(f"{collection}/{doc_id}", data)
    return len(records)


def migrate_initial_data(store: DocumentStore, business_id: str) -> Dict[str, int]:
    """Write the demo dataset into ``business_id`` at its fixed ids."""
    logger.info(f"Starting demo data migration for business {business_id}")
    base = business_path(business_id)
    counts = {
        PRODUCTS: _write_all(store, f"{base}/{PRODUCTS}", PRODUCTS_SEED),
        # No login account yet; the owner assigns routes later
        EMPLOYEES: _write_all(store, f"{base}/{EMPLOYEES}", EMPLOYEES_SEED,
                              userId=None, email=None, assignedRoutes=[]),
        TRUCKS: _write_all(store, f"{base}/{TRUCKS}", FLEET_SEED),
        ROUTES: _write_all(store, f"{base}/{ROUTES}", ROUTES_SEED),
        SALE_ALERTS: _write_all(store, f"{base}/{SALE_ALERTS}", SALE_ALERTS_SEED),
    }
    logger.info(f"Demo data migration complete for {business_id}: {counts}")
    return counts
