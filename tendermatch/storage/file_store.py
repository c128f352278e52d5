import contextlib
import os
import uuid
from pathlib import Path

from tendermatch.processor.exceptions import StorageError


def document_file_path(files_root: Path, storage_ref: str) -> Path:
    """Build path to a stored blob: {files_root}/{storage_ref}"""
    return files_root / storage_ref


class FileStore:
    """Durable blob storage for uploaded documents on the local filesystem.

    Blobs are addressed by a storage reference of the form
    ``{owner_id}/{uuid}.pdf``; the reference is what the document row keeps.
    """

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT

    def save(self, owner_id: int, content: bytes, extension: str = "pdf") -> str:
        """Write bytes durably and return the storage reference.

        Raises:
            StorageError: if the blob cannot be written.
        """
        storage_ref = f"{owner_id}/{uuid.uuid4()}.{extension}"
        path = document_file_path(self._files_root, storage_ref)
        tmp_path = path.with_suffix(path.suffix + ".part")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("wb") as fh:
                fh.write(content)
                fh.flush()
                os.fsync(fh.fileno())
            tmp_path.replace(path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to store document: {exc}") from exc
        return storage_ref

    def load(self, storage_ref: str) -> bytes:
        """Read stored bytes.

        Raises:
            StorageError: if the blob does not exist or cannot be read.
        """
        path = document_file_path(self._files_root, storage_ref)
        if not path.exists():
            raise StorageError(f"File not found: {storage_ref}")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read document: {exc}") from exc

    def exists(self, storage_ref: str) -> bool:
        return document_file_path(self._files_root, storage_ref).is_file()

    def delete(self, storage_ref: str) -> None:
        """Remove a stored blob. Missing blobs are ignored."""
        document_file_path(self._files_root, storage_ref).unlink(missing_ok=True)
