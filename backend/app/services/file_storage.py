"""Local file storage for company logos and invoice PDFs.

Files live flat under the configured upload directory and are served back by
the ``/uploads`` static mount, so every store operation returns the
``/uploads/<name>`` URL path.
"""

import logging
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

UPLOADS_PREFIX = "/uploads/"


@dataclass(frozen=True)
class FileMetadata:
    file_id: str
    filename: str
    file_path: Path
    content_type: str
    size: int


class FileStorage:
    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir).resolve()

    def ensure_directory(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def _write(self, name: str, content: bytes) -> str:
        path = self.ensure_directory() / name
        path.write_bytes(content)
        logger.info("Stored %s (%d bytes)", path, len(content))
        return UPLOADS_PREFIX + name

    def store_upload(self, filename: Optional[str], content: bytes, owner_id) -> str:
        """Store an uploaded logo as ``logo_<owner>_<uuid><ext>``."""
        if not content:
            raise ValueError("File cannot be empty")
        extension = Path(filename).suffix if filename else ""
        return self._write(f"logo_{owner_id}_{uuid.uuid4()}{extension}", content)

    def store_bytes(self, content: bytes, filename: str) -> str:
        if not content:
            raise ValueError("File bytes cannot be empty")
        if not filename or not filename.strip():
            raise ValueError("Filename cannot be empty")
        safe_name = Path(filename.strip()).name
        return self._write(f"file_{uuid.uuid4()}_{safe_name}", content)

    def resolve(self, file_id: str) -> Optional[Path]:
        """Map a file id (optionally ``/uploads/``-prefixed) to a path inside the upload dir."""
        clean_id = file_id[len(UPLOADS_PREFIX):] if file_id.startswith(UPLOADS_PREFIX) else file_id
        if not clean_id:
            return None
        path = (self.upload_dir / clean_id).resolve()
        if path.parent != self.upload_dir:
            return None
        return path

    def get_metadata(self, file_id: str) -> Optional[FileMetadata]:
        path = self.resolve(file_id)
        if path is None or not path.is_file():
            return None
        content_type, _ = mimetypes.guess_type(path.name)
        return FileMetadata(
            file_id=path.name,
            filename=path.name,
            file_path=path,
            content_type=content_type or "application/octet-stream",
            size=path.stat().st_size,
        )
