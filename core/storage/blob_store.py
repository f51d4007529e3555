"""Local filesystem storage for uploaded files."""

import logging
import re
import time
from pathlib import Path

logger = logging.getLogger("aurora.blob_store")

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_component(value: str) -> str:
    cleaned = _UNSAFE_CHARS.sub("_", value).strip("._")
    return cleaned or "file"


class LocalBlobStore:
    """Stores uploads as ``<root>/<user_id>/<epoch_ms>_<filename>``.

    Paths handed out are relative to the root; every path coming back in is
    resolved and must stay inside the root.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, file_path: str) -> Path:
        path = (self.root / file_path).resolve()
        if path != self.root and self.root not in path.parents:
            raise ValueError(f"Path escapes storage root: {file_path}")
        return path

    def save(self, user_id: str, filename: str, data: bytes) -> str:
        """Write ``data`` and return its storage path."""
        relative = f"{_safe_component(user_id)}/{int(time.time() * 1000)}_{_safe_component(filename)}"
        path = self._resolve(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Stored {len(data)} bytes at {relative}")
        return relative

    def read(self, file_path: str) -> bytes:
        return self._resolve(file_path).read_bytes()

    def delete(self, file_path: str) -> None:
        """Remove a stored file; a missing file is not an error."""
        self._resolve(file_path).unlink(missing_ok=True)

    def exists(self, file_path: str) -> bool:
        return self._resolve(file_path).is_file()
