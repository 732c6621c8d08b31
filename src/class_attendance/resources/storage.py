from __future__ import annotations

import logging
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Protocol

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from ..core.constants import ALLOWED_UPLOAD_EXTENSIONS, DEFAULT_MAX_UPLOAD_MB
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    filename: str
    extension: str


class FileStore(Protocol):
    def save(self, upload: FileStorage) -> StoredFile:
        raise NotImplementedError

    def delete(self, filename: str) -> None:
        raise NotImplementedError


class LocalFileStore(FileStore):
    """Keeps uploads as opaque blobs on local disk under generated names."""

    def __init__(
        self,
        upload_dir: str | Path,
        *,
        max_bytes: int = DEFAULT_MAX_UPLOAD_MB * 1024 * 1024,
        allowed_extensions: Iterable[str] = ALLOWED_UPLOAD_EXTENSIONS,
    ):
        self._dir = Path(upload_dir)
        self._max_bytes = int(max_bytes)
        self._allowed = frozenset(e.lower() for e in allowed_extensions)

    @property
    def directory(self) -> Path:
        return self._dir

    @staticmethod
    def extension_of(original_name: Optional[str]) -> str:
        return Path(secure_filename(original_name or "")).suffix.lower().lstrip(".")

    def _generate_name(self, field: str, extension: str) -> str:
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"{field or 'file'}-{unique}.{extension}"

    def save(self, upload: FileStorage) -> StoredFile:
        extension = self.extension_of(upload.filename)
        if extension not in self._allowed:
            raise ValidationError("Only PDF, DOC, DOCX, TXT, and image files are allowed!")

        self._dir.mkdir(parents=True, exist_ok=True)
        filename = self._generate_name(upload.name or "file", extension)
        path = self._dir / filename
        upload.save(str(path))

        if path.stat().st_size > self._max_bytes:
            path.unlink()
            raise ValidationError(f"File exceeds the {self._max_bytes // (1024 * 1024)} MB limit")

        logger.info("Stored upload %s", filename)
        return StoredFile(filename=filename, extension=extension)

    def delete(self, filename: str) -> None:
        path = self._dir / os.path.basename(filename)
        if path.exists():
            path.unlink()
            logger.info("Removed upload %s", filename)
