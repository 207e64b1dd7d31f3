"""File-backed key-value storage: one file per record name."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

_logger = logging.getLogger(__name__)


class FileStorage:
    """`StateStorage` writing each item to `<directory>/<quoted name>.json`.

    Writes go through a temporary file and an atomic rename, so a crash
    mid-write leaves the previous record intact.

    Args:
        directory: Directory for record files (created on first write).
        encoding: Text encoding of record files.
    """

    def __init__(self, directory: str | os.PathLike[str], encoding: str = "utf-8") -> None:
        self._directory = Path(directory)
        self._encoding = encoding

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, name: str) -> Path:
        if not name:
            raise ValueError("Storage item name must be non-empty")
        return self._directory / f"{quote(name, safe='')}.json"

    def get_item(self, name: str) -> str | None:
        path = self._path(name)
        try:
            return path.read_text(encoding=self._encoding)
        except FileNotFoundError:
            return None

    def set_item(self, name: str, value: str) -> None:
        path = self._path(name)
        self._directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding=self._encoding) as handle:
                handle.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        _logger.debug("Wrote %d characters to %s", len(value), path)

    def remove_item(self, name: str) -> None:
        self._path(name).unlink(missing_ok=True)
