"""Local buffer store: a key-value backend plus load/save/clear of the buffered log."""

import asyncio
import logging
import os
import tempfile
from typing import Protocol

from logferry.errors import StorageError
from logferry.models import BufferedLog

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_KEY = "logger"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...


class FileKeyValueStore:
    """Stores each key as one UTF-8 file under *directory*.

    Writes go to a temp file in the same directory and are moved into
    place with ``os.replace``, so a reader sees either the old or the new
    value. Blocking file I/O runs in a worker thread.
    """

    def __init__(self, directory: str):
        self._directory = directory
        os.makedirs(self._directory, exist_ok=True)

    def _path(self, key: str) -> str:
        if not key or os.sep in key or key in (".", ".."):
            raise StorageError(f"Invalid store key: {key!r}")
        return os.path.join(self._directory, f"{key}.json")

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, self._path(key))

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, self._path(key), value)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._unlink, self._path(key))

    @staticmethod
    def _read(path: str) -> str | None:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Could not read {path}: {exc}") from exc

    def _write(self, path: str, value: str):
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self._directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc

    @staticmethod
    def _unlink(path: str):
        try:
            os.unlink(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError(f"Could not remove {path}: {exc}") from exc


class BufferStore:
    """Owns the persisted buffer under a single well-known key.

    Callers hold no handle: every operation goes back to the backend.
    """

    def __init__(self, backend: KeyValueStore, key: str = DEFAULT_BUFFER_KEY):
        self._backend = backend
        self._key = key

    async def load_raw(self) -> str | None:
        """Return the serialized buffer, or None when nothing is buffered."""
        try:
            return await self._backend.get(self._key)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Could not read buffer '{self._key}': {exc}") from exc

    async def load(self) -> BufferedLog | None:
        raw = await self.load_raw()
        if raw is None:
            return None
        return self.parse(raw)

    def parse(self, raw: str) -> BufferedLog:
        try:
            return BufferedLog.from_json(raw)
        except ValueError as exc:
            raise StorageError(f"Buffer '{self._key}' is corrupt: {exc}") from exc

    async def save(self, buffer: BufferedLog):
        try:
            await self._backend.set(self._key, buffer.to_json())
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Could not write buffer '{self._key}': {exc}") from exc
        logger.debug("Saved %d buffered entries", len(buffer))

    async def clear(self):
        """Delete the persisted buffer. On failure the buffer stays in place."""
        try:
            await self._backend.remove(self._key)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Could not remove buffer '{self._key}': {exc}") from exc
        logger.debug("Cleared buffer '%s'", self._key)
