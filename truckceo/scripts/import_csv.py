#!/usr/bin/env python3
"""
Import a products, routes or stores CSV into a business from the command line.

Usage:
  python truckceo/scripts/import_csv.py biz_<uid> stores path/to/stores.csv
"""

import argparse
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from truckceo.app.config import Config
from truckceo.data.blob_storage import LocalBlobStorage
from truckceo.data.database import SessionLocal, create_tables
from truckceo.data.document_store import DocumentStore
from truckceo.data.gateway import PersistenceGateway
from truckceo.importers.csv_import import CSVImportService, CSVType


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a CSV file into a business")
    parser.add_argument("business_id")
    parser.add_argument("csv_type", choices=[t.value for t in CSVType])
    parser.add_argument("path")
    args = parser.parse_args()

    create_tables()
    gateway = PersistenceGateway(args.business_id, DocumentStore(SessionLocal))
    importer = CSVImportService(args.business_id, gateway, LocalBlobStorage(Config.BLOB_STORAGE_DIR))

    with open(args.path, "rb") as f:
        content = f.read()

    result = importer.upload_csv(os.path.basename(args.path), content, args.csv_type)
    status = "OK" if result.success else "FAILED"
    print(f"[{status}] {result.message} (records processed: {result.records_processed})")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
