"""Durable string-keyed storage for controller state."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .exceptions import StorageWriteError

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous string key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


def _atomic_write_text(path: Path, content: str) -> None:
    """Atomically write text to `path` using temp + fsync + os.replace."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp.", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


class MemoryStore:
    """In-process store; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Key-value store kept as one JSON object in a file.

    Every ``set`` rewrites the whole file atomically, so a crash leaves either
    the previous or the new contents on disk.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path).expanduser()
        self._data = self._read()
        logger.debug(f"Key-value store: {self.path} ({len(self._data)} keys)")

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            text = self.path.read_text(encoding="utf-8")
            data = json.loads(text) if text.strip() else {}
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.path}: top-level value is not an object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key`` and rewrite the file.

        Raises:
            StorageWriteError: The file could not be written; the value stays
                visible through :meth:`get` for this process.
        """
        self._data[key] = value
        content = json.dumps(self._data, indent=2, sort_keys=True) + "\n"
        try:
            _atomic_write_text(self.path, content)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self.path}: {e}") from e
