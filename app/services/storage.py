import asyncio
import hashlib
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from app.core.config import Settings
from app.core.logging import get_logger, log_fields

logger = get_logger(__name__)


@dataclass(frozen=True)
class FileBlob:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def suffix(self) -> str:
        return Path(self.filename).suffix.lower()


@dataclass(frozen=True)
class UploadResult:
    paths: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.paths[0]


class FileStorage(ABC):
    @abstractmethod
    async def upload(self, blobs: Sequence[FileBlob]) -> UploadResult | None:
        raise NotImplementedError


def _sha256_bytes(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class LocalFileStorage(FileStorage):
    """Writes blobs under a root directory; a failed call leaves none of its blobs behind."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def upload(self, blobs: Sequence[FileBlob]) -> UploadResult | None:
        if not blobs:
            return None
        return await asyncio.to_thread(self._write_all, list(blobs))

    def _write_all(self, blobs: list[FileBlob]) -> UploadResult | None:
        self.root.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        try:
            for blob in blobs:
                target = self.root / f"{uuid.uuid4().hex}{blob.suffix}"
                target.write_bytes(blob.content)
                written.append(target)
        except OSError:
            logger.exception("Upload failed; removing partial writes", extra=log_fields(root=str(self.root)))
            for path in written:
                path.unlink(missing_ok=True)
            return None

        for blob, path in zip(blobs, written):
            logger.info(
                "Stored upload",
                extra=log_fields(upload_name=blob.filename, path=str(path), sha256=_sha256_bytes(blob.content)),
            )
        return UploadResult(paths=[str(path) for path in written])


def build_file_storage(settings: Settings) -> FileStorage:
    return LocalFileStorage(settings.storage_dir)
