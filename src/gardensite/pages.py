"""HTML documents served verbatim from the templates directory.

Pages are read from disk on every request so edits show up without a
restart. ``PageLoader(cache=True)`` keeps bytes in memory but revalidates
each entry against the file's modification time.
"""

import threading
from pathlib import Path


class PageLoader:
    """Read named HTML documents from one directory.

    A read that fails for any reason (missing file, permission denied, a
    directory in the way) returns ``None``; callers treat that as not found.
    """

    __slots__ = ("_cache", "_cache_enabled", "_directory", "_lock")

    def __init__(self, directory: str | Path, *, cache: bool = False) -> None:
        self._directory = Path(directory).resolve()
        self._cache_enabled = cache
        # path -> (st_mtime_ns, bytes)
        self._cache: dict[Path, tuple[int, bytes]] = {}
        self._lock = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, name: str) -> Path | None:
        """Absolute path of *name*, or ``None`` if it escapes the directory."""
        path = (self._directory / name).resolve()
        if not path.is_relative_to(self._directory):
            return None
        return path

    def read(self, name: str) -> bytes | None:
        """Return the bytes of *name*, or ``None`` if it can't be read."""
        path = self.path_for(name)
        if path is None:
            return None
        if not self._cache_enabled:
            try:
                return path.read_bytes()
            except OSError:
                return None
        return self._read_cached(path)

    def _read_cached(self, path: Path) -> bytes | None:
        try:
            mtime = path.stat().st_mtime_ns
        except OSError:
            with self._lock:
                self._cache.pop(path, None)
            return None

        with self._lock:
            entry = self._cache.get(path)
        if entry is not None and entry[0] == mtime:
            return entry[1]

        try:
            body = path.read_bytes()
        except OSError:
            return None
        with self._lock:
            self._cache[path] = (mtime, body)
        return body
