#!/usr/bin/env python3
"""
CSV import pipeline for products, routes and stores.

Uploaded files are archived to blob storage, parsed with a header row, and
each row is mapped through a list of accepted column spellings before being
written through the persistence gateway. Rows that fail to map are logged
and skipped; only the number of written records is reported back.
"""

import csv
import enum
import io
import re
from typing import Dict, List, Optional, Sequence

from ..data.blob_storage import LocalBlobStorage, csv_upload_path
from ..data.gateway import PersistenceGateway
from ..schemas.entities import Product, ProductCategory, RouteTerritory, Store, new_store_id
from ..schemas.io_models import CSVUploadResult
from ..utils.logger import get_logger

logger = get_logger()


class CSVType(str, enum.Enum):
    products = "products"
    routes = "routes"
    stores = "stores"


# Accepted header spellings per field, tried in order (case-insensitive)
PRODUCT_COLUMNS = {
    "name": ("name", "product_name", "Product", "Product Name"),
    "category": ("category", "Category", "type"),
    "inventory": ("inventory", "current_inventory", "Inventory", "Current Inventory"),
    "last_order": ("last_order", "order_quantity", "Last Order", "Order Quantity"),
}
ROUTE_COLUMNS = {
    "name": ("route_name", "Route Name", "name", "Name"),
}
STORE_COLUMNS = {
    "route": ("route_name", "Route Name", "route"),
    "name": ("store_name", "Store Name", "name"),
    "address": ("address", "Address", "location"),
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class CSVParseError(ValueError):
    """The upload could not be read as delimited text."""


def normalize_category(category: Optional[str]) -> ProductCategory:
    """Map free-text categories onto buns / bread / snacks (the default)."""
    normalized = (category or "").lower().strip()
    if "bun" in normalized:
        return ProductCategory.buns
    if "bread" in normalized or "loaf" in normalized:
        return ProductCategory.bread
    return ProductCategory.snacks


def lookup(row: Dict[str, str], candidates: Sequence[str]) -> Optional[str]:
    """First non-empty value among ``candidates`` header spellings."""
    by_header: Dict[str, str] = {}
    for key, value in row.items():
        if not isinstance(key, str):
            continue
        folded = key.strip().lower()
        if folded not in by_header or not (by_header[folded] or "").strip():
            by_header[folded] = value
    for candidate in candidates:
        value = by_header.get(candidate.lower())
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def parse_int(value: Optional[str]) -> int:
    """Leading integer of ``value``; missing values count as 0."""
    if value is None or not value.strip():
        return 0
    match = _LEADING_INT.match(value)
    if not match:
        raise ValueError(f"Not a number: {value!r}")
    return int(match.group(1))


def parse_csv(content: bytes) -> List[Dict[str, str]]:
    """Parse a header-row CSV into dicts, skipping blank lines."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise CSVParseError(f"File is not valid UTF-8 text: {e}") from e
    try:
        reader = csv.DictReader(io.StringIO(text, newline=""), skipinitialspace=True)
        rows = []
        for row in reader:
            if all(not (v or "").strip() for v in row.values() if isinstance(v, str)):
                continue
            rows.append(row)
    except csv.Error as e:
        raise CSVParseError(f"Malformed CSV: {e}") from e
    return rows


class CSVImportService:
    """Imports CSV uploads into one business."""

    def __init__(self, business_id: str, gateway: PersistenceGateway, blob_storage: LocalBlobStorage):
        self.business_id = business_id
        self.gateway = gateway
        self.blob_storage = blob_storage

    def upload_csv(self, filename: str, content: bytes, csv_type) -> CSVUploadResult:
        """Archive, parse and import a CSV file.

        Returns:
            CSVUploadResult; ``success`` is False only when archiving, parsing
            or the import as a whole raised. Skipped rows do not fail it.
        """
        try:
            csv_type = CSVType(csv_type)
            logger.info(f"Uploading {csv_type.value} CSV file: {filename}")

            url = self.blob_storage.upload(csv_upload_path(self.business_id, filename), content)
            logger.info(f"File uploaded to storage: {url}")

            rows = parse_csv(content)
            logger.info(f"CSV parsed: {len(rows)} rows")

            if csv_type is CSVType.products:
                processed = self.process_products(rows)
            elif csv_type is CSVType.routes:
                processed = self.process_routes(rows)
            else:
                processed = self.process_stores(rows)

            return CSVUploadResult(
                success=True,
                message=f"Successfully imported {processed} {csv_type.value}",
                records_processed=processed,
            )
        except Exception as e:
            logger.error(f"CSV upload error: {e}")
            return CSVUploadResult(
                success=False,
                message=str(e) or "Failed to process CSV file",
                records_processed=0,
            )

    def process_products(self, rows: List[Dict[str, str]]) -> int:
        count = 0
        for row in rows:
            try:
                name = lookup(row, PRODUCT_COLUMNS["name"])
                if not name:
                    continue
                product = Product(
                    name=name,
                    category=normalize_category(lookup(row, PRODUCT_COLUMNS["category"])),
                    current_inventory=parse_int(lookup(row, PRODUCT_COLUMNS["inventory"])),
                    last_order_quantity=parse_int(lookup(row, PRODUCT_COLUMNS["last_order"])),
                )
                self.gateway.products.add(product)
                count += 1
            except Exception as e:
                logger.error(f"Error processing product row {row}: {e}")
        return count

    def process_routes(self, rows: List[Dict[str, str]]) -> int:
        count = 0
        for row in rows:
            try:
                name = lookup(row, ROUTE_COLUMNS["name"])
                if not name:
                    continue
                self.gateway.routes.add(RouteTerritory(name=name, stores=[]))
                count += 1
            except Exception as e:
                logger.error(f"Error processing route row {row}: {e}")
        return count

    def process_stores(self, rows: List[Dict[str, str]]) -> int:
        """Group stores by route name and append them to matching routes."""
        stores_by_route: Dict[str, List[Store]] = {}
        for row in rows:
            try:
                route_name = lookup(row, STORE_COLUMNS["route"])
                store_name = lookup(row, STORE_COLUMNS["name"])
                if not route_name or not store_name:
                    continue
                store = Store(
                    id=new_store_id(),
                    name=store_name,
                    address=lookup(row, STORE_COLUMNS["address"]) or "",
                )
                stores_by_route.setdefault(route_name, []).append(store)
            except Exception as e:
                logger.error(f"Error processing store row {row}: {e}")

        count = 0
        for route in self.gateway.routes.get_all():
            new_stores = stores_by_route.get(route.name)
            if not new_stores:
                continue
            # Whole-array rewrite: concurrent edits to this route are lost
            stores = [s.model_dump(mode="json") for s in route.stores + new_stores]
            self.gateway.routes.update(route.id, {"stores": stores})
            count += len(new_stores)
        return count
