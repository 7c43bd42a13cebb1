"""
Backdrop Storage - uploaded e-card backdrop images on the local filesystem

Every path handed in by a client (folder paths, file paths stored on
templates) is resolved against UPLOAD_DIR and rejected if it escapes it.
Stored file paths look like "uploads/<folder>/<file>" regardless of where
UPLOAD_DIR lives on disk.
"""

from pathlib import Path, PurePosixPath
from typing import Dict, List, Optional

import aiofiles
import aiofiles.os

from blastdesk.core.config import settings
from blastdesk.core.exceptions import (
    ValidationError,
    InvalidFileTypeError,
    FileTooLargeError,
    FileNotFoundInStorageError,
    StorageError,
)
from blastdesk.core.logging_config import logger


PUBLIC_PREFIX = "uploads"


class BackdropStorage:
    """Folder tree of backdrop images rooted at UPLOAD_DIR"""

    def __init__(
        self,
        base_dir: Optional[str] = None,
        allowed_extensions: Optional[List[str]] = None,
        max_size_bytes: Optional[int] = None
    ):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR).resolve()
        self.allowed_extensions = allowed_extensions or settings.ALLOWED_BACKDROP_EXTENSIONS
        self.max_size_bytes = max_size_bytes or settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def ensure_base_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    # ==================== Path handling ====================

    @staticmethod
    def _relative_parts(path: Optional[str], public: bool = False) -> List[str]:
        """Split a client path into parts; public file paths lose their "uploads" prefix"""
        parts = [p for p in (path or "").replace("\\", "/").split("/") if p not in ("", ".")]
        if public and parts and parts[0] == PUBLIC_PREFIX:
            parts = parts[1:]
        return parts

    def resolve(self, path: Optional[str], public: bool = False) -> Path:
        """Absolute location of a client path; raises ValidationError on traversal"""
        parts = self._relative_parts(path, public)
        if any(part == ".." for part in parts):
            raise ValidationError("Invalid path", field="path")

        target = self.base_dir.joinpath(*parts).resolve()
        if target != self.base_dir and self.base_dir not in target.parents:
            raise ValidationError("Invalid path", field="path")
        return target

    def public_path(self, target: Path) -> str:
        relative = target.relative_to(self.base_dir).as_posix()
        return f"{PUBLIC_PREFIX}/{relative}"

    # ==================== Operations ====================

    def validate_upload(self, filename: Optional[str], size: int) -> str:
        """Check name, extension and size of an upload; returns the bare filename"""
        if not filename:
            raise ValidationError("No file uploaded.", field="ecardBackdrop")

        name = PurePosixPath(filename.replace("\\", "/")).name
        if not name or name in (".", ".."):
            raise ValidationError("Invalid file name", field="ecardBackdrop")

        extension = PurePosixPath(name).suffix.lower()
        if extension not in self.allowed_extensions:
            raise InvalidFileTypeError(extension or "(none)", self.allowed_extensions)

        if size > self.max_size_bytes:
            raise FileTooLargeError(size, self.max_size_bytes)

        return name

    async def save(self, folder: Optional[str], filename: Optional[str], content: bytes) -> str:
        """Store an uploaded backdrop and return its public file path"""
        name = self.validate_upload(filename, len(content))
        self.ensure_base_dir()
        directory = self.resolve(folder)

        if not directory.is_dir():
            raise FileNotFoundInStorageError(folder or "/")

        target = directory / name
        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"[Backdrops] Failed to write {target}: {e}")
            raise StorageError("Failed to store uploaded file") from e

        file_path = self.public_path(target)
        logger.info(f"[Backdrops] Stored {file_path} ({len(content)} bytes)")
        return file_path

    async def read(self, file_path: str) -> bytes:
        """Bytes of a stored backdrop; raises FileNotFoundInStorageError when missing"""
        target = self.resolve(file_path, public=True)
        if not await aiofiles.os.path.isfile(target):
            raise FileNotFoundInStorageError(file_path)

        async with aiofiles.open(target, "rb") as f:
            return await f.read()

    def locate(self, file_path: str) -> Path:
        """Existing file on disk for serving; raises FileNotFoundInStorageError"""
        target = self.resolve(file_path, public=True)
        if not target.is_file():
            raise FileNotFoundInStorageError(file_path)
        return target

    def list_folder(self, folder: Optional[str]) -> Dict[str, List[str]]:
        self.ensure_base_dir()
        directory = self.resolve(folder)
        if not directory.is_dir():
            raise FileNotFoundInStorageError(folder or "/")

        files: List[str] = []
        folders: List[str] = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name.lower()):
            (folders if entry.is_dir() else files).append(entry.name)
        return {"files": files, "folders": folders}

    def create_folder(self, folder: Optional[str], folder_name: Optional[str]) -> str:
        if not folder_name or not folder_name.strip():
            raise ValidationError("Folder name is required", field="folderName")

        target = self.resolve("/".join([folder or "/", folder_name.strip()]))
        if target == self.base_dir:
            raise ValidationError("Invalid folder name", field="folderName")

        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"[Backdrops] Failed to create folder {target}: {e}")
            raise StorageError("Failed to create folder") from e

        logger.info(f"[Backdrops] Created folder {self.public_path(target)}")
        return self.public_path(target)


backdrop_storage = BackdropStorage()


def get_backdrop_storage() -> BackdropStorage:
    """FastAPI dependency for the shared storage"""
    return backdrop_storage
