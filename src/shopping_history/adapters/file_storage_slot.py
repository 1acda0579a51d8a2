"""JSON file-backed storage slot."""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from shopping_history.services.records import StorageSlot


@dataclass
class FileStorageSlot(StorageSlot):
    """Keeps one named entry as ``<directory>/<key>.json``."""

    directory: Path
    key: str

    @classmethod
    def create(cls, directory: str, key: str) -> "FileStorageSlot":
        """Create a slot, expanding ``~`` in the directory."""
        return cls(directory=Path(directory).expanduser(), key=key)

    @property
    def path(self) -> Path:
        """Return the file holding the slot's value."""
        return self.directory / f"{self.key}.json"

    def read(self) -> str | None:
        """Return the file's text, or None when it does not exist yet."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, value: str) -> None:
        """Replace the file atomically so readers never see a partial write."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.directory, prefix=f".{self.key}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(value)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
