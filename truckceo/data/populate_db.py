import sys

from .database import SessionLocal, create_tables
from .document_store import DocumentStore
from .gateway import PersistenceGateway
from .seed_data import migrate_initial_data


def populate_business(business_id: str):
    """Write the demo dataset into ``business_id`` unless it already has products."""
    # Ensure tables are created
    create_tables()

    store = DocumentStore(SessionLocal)
    if PersistenceGateway(business_id, store).products.get_all():
        print(f"Business {business_id} already has data. Skipping population.")
        return

    counts = migrate_initial_data(store, business_id)
    print(f"Successfully populated {business_id}: {counts}")

if __name__ == "__main__":
    populate_business(sys.argv[1] if len(sys.argv) > 1 else "biz_demo")
