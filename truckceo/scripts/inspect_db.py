#!/usr/bin/env python3
"""
Inspect one business in the document store: print every collection and the
route/store hierarchy.

Usage:
  python truckceo/scripts/inspect_db.py biz_<uid>

Notes:
- Uses the configured DATABASE_URL.
- Safe read-only inspection; makes no writes.
"""

from __future__ import annotations

import argparse
import os
import sys

# Allow running from repo root or from truckceo/
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from truckceo.data.database import SessionLocal, create_tables
from truckceo.data.document_store import DocumentStore
from truckceo.data.gateway import PersistenceGateway


def line(ch: str = "-", width: int = 60) -> str:
    return ch * width


def header(title: str) -> None:
    print(line("="))
    print(title)
    print(line("="))


def print_products(gateway: PersistenceGateway) -> None:
    header("Products")
    products = sorted(gateway.products.get_all(), key=lambda p: p.name)
    print(f"Total products: {len(products)}")
    for p in products:
        print(f"- {p.id} {p.name} | {p.category.value} | stock={p.current_inventory} | last order={p.last_order_quantity}")
    print()


def print_employees(gateway: PersistenceGateway) -> None:
    header("Employees")
    employees = sorted(gateway.employees.get_all(), key=lambda e: e.name)
    print(f"Total employees: {len(employees)}")
    for e in employees:
        routes = ", ".join(e.assigned_routes) or "(none)"
        print(f"- {e.id} {e.name} | {e.role.value} | {e.status.value} | routes={routes} | login={e.user_id or '(none)'}")
    print()


def print_trucks(gateway: PersistenceGateway) -> None:
    header("Fleet")
    trucks = sorted(gateway.trucks.get_all(), key=lambda t: t.plate)
    print(f"Total trucks: {len(trucks)}")
    for t in trucks:
        issues = "; ".join(t.issues) or "no issues"
        print(f"- {t.id} {t.plate} | {t.type} | {t.mileage} mi | {t.health_status.value} | {issues}")
    print()


def print_routes(gateway: PersistenceGateway) -> None:
    header("Routes (with stores)")
    routes = sorted(gateway.routes.get_all(), key=lambda r: r.name)
    print(f"Total routes: {len(routes)}")
    for r in routes:
        print(f"- {r.id} {r.name} ({len(r.stores)} stores)")
        for s in r.stores:
            print(f"    * {s.id} {s.name} | {s.address or '(no address)'}")
    print()


def print_sale_alerts(gateway: PersistenceGateway) -> None:
    header("Sale alerts")
    alerts = gateway.sale_alerts.get_all()
    print(f"Total sale alerts: {len(alerts)}")
    for a in alerts:
        print(f"- {a.id} {a.store_name} | {a.promo_type} | {a.date} | contact={a.contact_name or '(none)'}")
    print()


def main() -> None:
    parser = argparse.ArgumentParser(description="Print a business's data")
    parser.add_argument("business_id")
    args = parser.parse_args()

    create_tables()
    gateway = PersistenceGateway(args.business_id, DocumentStore(SessionLocal))
    print_products(gateway)
    print_employees(gateway)
    print_trucks(gateway)
    print_routes(gateway)
    print_sale_alerts(gateway)


if __name__ == "__main__":
    main()
