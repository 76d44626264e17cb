"""
TruckCEO Backend: System Documentation
======================================

Module-style README for the TruckCEO operations backend: the data-access,
synchronization and CSV import layer behind the console a bread-route
business uses to manage routes, stores, products, staff, trucks and store
promotions.

How to use this file
--------------------
- View in an editor for structured reading.
- Run `python README.py` to print the outline.

Table of Contents
-----------------
1. System Overview
2. Architecture
3. Data Model
4. Sessions & Role Scoping
5. Write-then-Refetch
6. CSV Import
7. Assistant
8. Configuration & Environment
9. Testing
10. Running Locally
"""

from __future__ import annotations

import textwrap


def section(title: str, body: str) -> str:
    return f"\n{title}\n{'-' * len(title)}\n{body.strip()}\n"


SYSTEM_OVERVIEW = section(
    "1. System Overview",
    """
    Every business owns a tree of documents at
    `businesses/{businessId}/{collection}/{docId}` with five collections:
    products, employees, trucks, routes (stores embedded) and saleAlerts.
    Identities map to a business through `users/{uid}` profiles. A session
    holds one immutable snapshot of what its user may see and refreshes it
    in full after every write.
    """,
)

ARCHITECTURE = section(
    "2. Architecture",
    """
    - truckceo/data: SQLAlchemy document store, persistence gateway,
      accounts, blob storage for uploads, demo seed data.
    - truckceo/sync: role scoping and the per-session SyncContext.
    - truckceo/importers: CSV pipeline for products, routes and stores.
    - truckceo/agents: Gemini assistant, local fallback, tool executor.
    - truckceo/app: FastAPI app, config, Gemini REST client, chat sessions.
    - truckceo/schemas: pydantic entities and API models.
    """,
)

DATA_MODEL = section(
    "3. Data Model",
    """
    - One `documents` table keyed by full path; `collection_path` indexes
      listing. Document bodies are JSON with camelCase field names.
    - Ids are store-generated 20-char alphanumerics; seed data keeps its
      fixed ids (`driver-1`, `t3`, `ct-1` ...).
    - Partial updates are validated per field before being merged.
    - Stores live inside their route; each store change rewrites the whole
      `stores` array (last write wins between concurrent editors).
    """,
)

SESSIONS = section(
    "4. Sessions & Role Scoping",
    """
    - business_owner: all five collections.
    - team_member: all products, own employee record, routes listed in
      `assignedRoutes`; no trucks, no sale alerts.
    - A member without a resolvable employee record gets an empty view.
    - First sign-in of an unknown uid registers an owner with business
      `biz_{uid}` seeded with demo data.
    """,
)

REFETCH = section(
    "5. Write-then-Refetch",
    """
    - A mutation returns only after the write and the full reload finish.
    - A failed write raises and leaves the snapshot untouched.
    - A failed reload after a committed write raises; the old snapshot stays.
    - `refetch_all` on its own logs failures and keeps the old snapshot.
    """,
)

CSV_IMPORT = section(
    "6. CSV Import",
    """
    - Uploads are archived under `businesses/{id}/csv-uploads/{ts}_{name}`.
    - Header spellings are matched case-insensitively from a fixed list.
    - Bad rows are logged and skipped; the result only counts written rows.
    - Stores CSVs append to every route whose name matches `route_name`.
    """,
)

ASSISTANT = section(
    "7. Assistant",
    """
    - With GEMINI_API_KEY set: order suggestions (JSON schema output),
      chat with function calls applied to session data, truck-safe routing.
    - Without it: deterministic demo suggestions and canned replies.
    - Chat history is kept in Redis, or process memory if Redis is down.
    """,
)

CONFIG_ENV = section(
    "8. Configuration & Environment",
    """
    - DATABASE_URL, BLOB_STORAGE_DIR, GEMINI_API_KEY, GEMINI_MODEL,
      GEMINI_TIMEOUT, REDIS_HOST/PORT/DB, LOG_LEVEL, loaded from `.env`.
    """,
)

TESTING = section(
    "9. Testing",
    """
    - `pip install -e .[test]` then `python -m pytest tests -v`.
    - Every suite builds its own in-memory SQLite store.
    """,
)

RUNNING = section(
    "10. Running Locally",
    """
    - `uvicorn truckceo.app.main:app --reload`
    - `python -m truckceo.data.populate_db biz_demo` seeds a business.
    - `python truckceo/scripts/import_csv.py biz_demo stores stores.csv`
    - `python truckceo/scripts/inspect_db.py biz_demo`
    """,
)


def as_text() -> str:
    return "\n".join(
        [
            SYSTEM_OVERVIEW,
            ARCHITECTURE,
            DATA_MODEL,
            SESSIONS,
            REFETCH,
            CSV_IMPORT,
            ASSISTANT,
            CONFIG_ENV,
            TESTING,
            RUNNING,
        ]
    )


def main() -> None:
    print(textwrap.dedent(as_text()))


if __name__ == "__main__":
    main()
