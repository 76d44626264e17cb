"""Archival blob storage for uploaded files, kept on the local filesystem."""
import os
import time
from pathlib import Path

from .errors import InvalidPathError
from ..utils.logger import get_logger

logger = get_logger()


def csv_upload_path(business_id: str, filename: str, timestamp_ms: int = None) -> str:
    """``businesses/{businessId}/csv-uploads/{timestamp}_{filename}``"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    safe_name = os.path.basename(filename or "upload.csv")
    return f"businesses/{business_id}/csv-uploads/{timestamp_ms}_{safe_name}"


class LocalBlobStorage:
    def __init__(self, root_dir: str):
        self.root = Path(root_dir).resolve()

    def _resolve(self, blob_path: str) -> Path:
        target = (self.root / blob_path.strip("/")).resolve()
        if self.root not in target.parents:
            raise InvalidPathError(f"Blob path escapes storage root: {blob_path!r}")
        return target

    def upload(self, blob_path: str, content: bytes) -> str:
        """Store ``content`` at ``blob_path`` and return its URL."""
        target = self._resolve(blob_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        logger.info(f"Stored blob {blob_path} ({len(content)} bytes)")
        return target.as_uri()

    def download(self, blob_path: str) -> bytes:
        return self._resolve(blob_path).read_bytes()

    def exists(self, blob_path: str) -> bool:
        return self._resolve(blob_path).is_file()
