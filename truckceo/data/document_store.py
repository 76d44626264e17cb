"""
Hierarchical document store backed by SQLAlchemy.

Documents are JSON objects addressed by slash-separated paths that alternate
collection and document segments, e.g. ``businesses/biz_1/products/abc``.
Every public operation runs in its own session and either commits as a unit
or rolls back, so a single-document write is never partially applied.
"""

import copy
import secrets
import string
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import DocumentNotFoundError, InvalidPathError, StoreOperationError
from .models import DocumentRecord
from ..utils.logger import get_logger

logger = get_logger()

ID_ALPHABET = string.ascii_letters + string.digits
ID_LENGTH = 20


def _segments(path: str) -> List[str]:
    parts = [p for p in (path or "").strip("/").split("/")]
    if not parts or any(not p for p in parts):
        raise InvalidPathError(f"Malformed path: {path!r}")
    return parts


def split_document_path(path: str) -> Tuple[str, str]:
    """Return ``(collection_path, doc_id)`` for a document path."""
    parts = _segments(path)
    if len(parts) % 2 != 0:
        raise InvalidPathError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def normalize_collection_path(path: str) -> str:
    parts = _segments(path)
    if len(parts) % 2 != 1:
        raise InvalidPathError(f"Not a collection path: {path!r}")
    return "/".join(parts)


class DocumentStore:
    """Firestore-style document operations over a relational table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def _run(self, operation: Callable[[Session], Any]) -> Any:
        db = self._session_factory()
        try:
            result = operation(db)
            db.commit()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Document store operation failed: {e}")
            raise StoreOperationError(str(e)) from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def new_id() -> str:
        """Generate a store-assigned document id."""
        return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))

    def collection(self, path: str) -> List[Tuple[str, Dict[str, Any]]]:
        """List every document in a collection as ``(doc_id, data)`` pairs."""
        collection_path = normalize_collection_path(path)

        def op(db: Session):
            rows = db.query(DocumentRecord).filter(
                DocumentRecord.collection_path == collection_path
            ).all()
            return [(row.doc_id, copy.deepcopy(row.data or {})) for row in rows]

        return self._run(op)

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Return the document data, or None when it does not exist."""
        collection_path, doc_id = split_document_path(path)
        doc_path = f"{collection_path}/{doc_id}"

        def op(db: Session):
            row = db.get(DocumentRecord, doc_path)
            return copy.deepcopy(row.data) if row is not None else None

        return self._run(op)

    def set(self, path: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document."""
        collection_path, doc_id = split_document_path(path)
        doc_path = f"{collection_path}/{doc_id}"
        payload = copy.deepcopy(data)

        def op(db: Session):
            row = db.get(DocumentRecord, doc_path)
            if row is None:
                db.add(DocumentRecord(
                    path=doc_path,
                    collection_path=collection_path,
                    doc_id=doc_id,
                    data=payload,
                ))
            else:
                row.data = payload

        self._run(op)

    def update(self, path: str, fields: Dict[str, Any]) -> None:
        """Merge top-level fields into an existing document.

        Raises:
            DocumentNotFoundError: when the document does not exist.
        """
        collection_path, doc_id = split_document_path(path)
        doc_path = f"{collection_path}/{doc_id}"
        changes = copy.deepcopy(fields)

        def op(db: Session):
            row = db.get(DocumentRecord, doc_path)
            if row is None:
                raise DocumentNotFoundError(doc_path)
            merged = dict(row.data or {})
            merged.update(changes)
            # Reassign so the JSON column is flagged dirty
            row.data = merged

        self._run(op)

    def delete(self, path: str) -> None:
        """Delete a document; deleting a missing document is a no-op."""
        collection_path, doc_id = split_document_path(path)
        doc_path = f"{collection_path}/{doc_id}"

        def op(db: Session):
            row = db.get(DocumentRecord, doc_path)
            if row is not None:
                db.delete(row)

        self._run(op)
