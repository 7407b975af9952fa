"""Directory listings, cached per subdirectory"""

import logging
import os
import random
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


class FileServeError(Exception):
    """Anything that ends a request with an empty 404"""


class DirectoryUnavailable(FileServeError):
    """The directory is missing, not a directory, or outside the root"""


class EmptyDirectory(FileServeError):
    """The directory exists but holds no regular files"""


class ReadFailure(FileServeError):
    """The selected file could not be read"""


def scan_directory(path: Path) -> List[Path]:
    """Return the regular files directly inside `path`, sorted by name."""
    path = Path(path)
    if not path.is_dir():
        raise DirectoryUnavailable(f"Not a directory: {path}")

    try:
        with os.scandir(path) as entries:
            files = [
                path / entry.name
                for entry in entries
                if entry.is_file(follow_symlinks=False)
            ]
    except OSError as e:
        raise DirectoryUnavailable(f"Cannot list {path}: {e}") from e

    return sorted(files)


def select_random(items: Sequence, rng: Optional[random.Random] = None):
    """Pick one element uniformly. `items` must not be empty."""
    return (rng or random).choice(items)


class FileIndex:
    """
    Maps subdirectory keys to the files found there.

    One lock guards the whole mapping. Entries are only ever stored non-empty
    and are replaced wholesale, so readers see either the old or the new list.
    """

    def __init__(
        self,
        root: Path = Path("files"),
        scanner: Callable[[Path], List[Path]] = scan_directory,
        selector: Callable[[Sequence], Path] = select_random,
    ):
        self.root = Path(root)
        self._scan = scanner
        self._select = selector
        self._entries: Dict[str, List[Path]] = {}
        self._lock = threading.Lock()

    def resolve(self, key: str) -> Path:
        """Directory for `key`. Keys that leave the root are rejected."""
        root = os.path.normpath(self.root)
        if os.path.isabs(key):
            raise DirectoryUnavailable(f"Absolute key rejected: {key!r}")

        target = os.path.normpath(os.path.join(root, key))
        if root == os.curdir:
            escapes = target == os.pardir or target.startswith(os.pardir + os.sep)
        else:
            prefix = root if root.endswith(os.sep) else root + os.sep
            escapes = target != root and not target.startswith(prefix)
        if escapes:
            raise DirectoryUnavailable(f"Key escapes files root: {key!r}")

        return self.root / key

    def lookup(self, key: str) -> Optional[List[Path]]:
        with self._lock:
            entry = self._entries.get(key)
            return list(entry) if entry is not None else None

    def has_entries(self, key: str) -> bool:
        with self._lock:
            return bool(self._entries.get(key))

    def refresh(self, key: str) -> List[Path]:
        """Rescan `key`. On failure the cache keeps whatever it had for it."""
        with self._lock:
            return list(self._refresh_locked(key))

    def get_or_refresh(self, key: str, force_refresh: bool = False) -> List[Path]:
        with self._lock:
            return list(self._get_or_refresh_locked(key, force_refresh))

    def choose(self, key: str, force_refresh: bool = False) -> Path:
        """Look up (or rescan) `key` and pick one file, in one critical section."""
        with self._lock:
            files = self._get_or_refresh_locked(key, force_refresh)
            selected = self._select(files)

        logger.info(f"Selected file: {selected}")
        return selected

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # Callers must hold self._lock

    def _get_or_refresh_locked(self, key: str, force_refresh: bool) -> List[Path]:
        if not force_refresh and key in self._entries:
            return self._entries[key]
        return self._refresh_locked(key)

    def _refresh_locked(self, key: str) -> List[Path]:
        directory = self.resolve(key)
        files = self._scan(directory)
        logger.info(f"Files found in '{directory}' directory: {[str(f) for f in files]}")

        if not files:
            raise EmptyDirectory(f"No files in {directory}")

        self._entries[key] = list(files)
        return self._entries[key]
