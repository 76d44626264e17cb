from sqlalchemy import Column, String, DateTime, JSON, Index
from sqlalchemy.sql import func
from .database import Base


class DocumentRecord(Base):
    """One document of the hierarchical store, addressed by its full path.

    ``collection_path`` is the path minus the trailing document id, so listing
    ``businesses/biz_1/products`` is a single indexed equality lookup.
    """
    __tablename__ = "documents"

    path = Column(String, primary_key=True)
    collection_path = Column(String, nullable=False)
    doc_id = Column(String, nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_documents_collection_path", "collection_path"),
    )
