from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from ..app.config import Config

# Create a base class for our models
Base = declarative_base()


def make_engine(database_url: str):
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)
    return create_engine(database_url, pool_pre_ping=True)


# Create the SQLAlchemy engine
engine = make_engine(Config.DATABASE_URL)

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def create_tables(bind=None):
    """Create all tables in the database."""
    # Import all models here before calling create_all
    # This ensures they are registered with the Base metadata
    from .models import DocumentRecord
    Base.metadata.create_all(bind=bind or engine)

if __name__ == "__main__":
    create_tables()
    print("Database tables created successfully.")
