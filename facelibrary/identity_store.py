"""
Identity Store Module

Disk-backed keyed collection of identity records. The whole library is
kept in memory and rewritten to a single JSON snapshot after every
addition. All map mutations and snapshot writes share one lock.
"""

import json
import logging
import os
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional

from .exceptions import PersistenceError
from .identity import IdentityRecord

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = 'Data'
DEFAULT_SNAPSHOT_FILE = 'data_library.json'
SNAPSHOT_VERSION = '1.0'


class PersistenceResult:
    """Outcome of a snapshot load or save."""

    def __init__(self, path: str, error: Optional[PersistenceError] = None):
        self.path = path
        self.error = error

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self):
        if self.error is not None:
            raise self.error

    def __bool__(self):
        return self.ok

    def __repr__(self):
        status = 'ok' if self.ok else f"error={self.error}"
        return f"PersistenceResult(path={self.path!r}, {status})"


class IdentityStore:
    """Keyed identity records persisted to ``<data_dir>/data_library.json``."""

    def __init__(self, data_dir: str = DEFAULT_DATA_DIR,
                 snapshot_file: str = DEFAULT_SNAPSHOT_FILE):
        """
        Initialize an empty store. Call ``load()`` to read the snapshot.

        Args:
            data_dir: Directory holding the snapshot and per-identity folders
            snapshot_file: Snapshot file name inside ``data_dir``
        """
        self.data_dir = data_dir
        self.snapshot_path = os.path.join(data_dir, snapshot_file)
        self._identities: Dict[str, IdentityRecord] = {}
        self._lock = threading.RLock()
        self.last_error: Optional[PersistenceError] = None

    def _ensure_directories(self) -> Optional[PersistenceError]:
        try:
            os.makedirs(self.data_dir, exist_ok=True)
        except OSError as e:
            return PersistenceError(f"Failed to create data directory: {e}", self.data_dir)
        return None

    def identity_dir(self, key: str) -> str:
        return os.path.join(self.data_dir, key)

    def load(self) -> PersistenceResult:
        """
        Replace the in-memory map with the snapshot contents.

        A missing or corrupt snapshot leaves the store empty.
        """
        with self._lock:
            error = self._ensure_directories()
            if error is None:
                error = self._read_snapshot()
            return self._report(error, 'load')

    def _read_snapshot(self) -> Optional[PersistenceError]:
        if not os.path.exists(self.snapshot_path):
            logger.info(f"No existing snapshot at {self.snapshot_path}, starting fresh")
            return None

        try:
            with open(self.snapshot_path, 'r') as f:
                data = json.load(f)
            identities = {
                key: IdentityRecord.from_dict(record)
                for key, record in data.get('identities', {}).items()
            }
        except (OSError, ValueError, TypeError, AttributeError) as e:
            self._identities = {}
            return PersistenceError(f"Failed to load snapshot: {e}", self.snapshot_path)

        self._identities = identities
        logger.info(f"Loaded {len(identities)} identities from {self.snapshot_path}")
        return None

    def save(self) -> PersistenceResult:
        """Rewrite the full snapshot from the in-memory map."""
        with self._lock:
            error = self._ensure_directories()
            if error is None:
                error = self._write_snapshot()
            return self._report(error, 'save')

    def _write_snapshot(self) -> Optional[PersistenceError]:
        data = {
            'identities': {key: record.to_dict() for key, record in self._identities.items()},
            'version': SNAPSHOT_VERSION,
            'saved_at': datetime.now().isoformat()
        }
        try:
            encoded = json.dumps(data)
            with open(self.snapshot_path, 'w') as f:
                f.write(encoded)
        except (OSError, TypeError, ValueError) as e:
            return PersistenceError(f"Failed to save snapshot: {e}", self.snapshot_path)

        logger.debug(f"Snapshot saved to {self.snapshot_path}")
        return None

    def _report(self, error: Optional[PersistenceError], action: str) -> PersistenceResult:
        self.last_error = error
        if error is not None:
            logger.error(f"Snapshot {action} failed, continuing in memory: {error}")
        return PersistenceResult(self.snapshot_path, error)

    def add_identity(self, record: IdentityRecord) -> PersistenceResult:
        """Insert or overwrite ``record`` under its composite key and persist."""
        with self._lock:
            if record.key in self._identities:
                logger.warning(f"Overwriting existing identity {record.key}")
            self._identities[record.key] = record
            logger.info(f"Added identity {record.key}")
            return self.save()

    def identities(self) -> Dict[str, IdentityRecord]:
        """Shallow copy of the identity map, in insertion order."""
        with self._lock:
            return dict(self._identities)

    def get_identity(self, key: str) -> Optional[IdentityRecord]:
        with self._lock:
            return self._identities.get(key)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._identities)

    def get_statistics(self) -> Dict[str, Any]:
        with self._lock:
            records = list(self._identities.values())
        return {
            'total_identities': len(records),
            'trained_identities': sum(1 for r in records if r.is_trained()),
            'total_training_images': sum(len(r.training_images) for r in records),
            'snapshot_path': self.snapshot_path,
            'last_error': str(self.last_error) if self.last_error else None
        }

    def __len__(self):
        with self._lock:
            return len(self._identities)

    def __contains__(self, key):
        with self._lock:
            return key in self._identities


_stores: Dict[str, IdentityStore] = {}
_stores_lock = threading.Lock()


def get_store(data_dir: str = DEFAULT_DATA_DIR,
              snapshot_file: str = DEFAULT_SNAPSHOT_FILE) -> IdentityStore:
    """
    Return the process-wide store for ``data_dir``.

    The snapshot is loaded on the first call for a directory. Every call
    rewrites the snapshot before returning.
    """
    path = os.path.abspath(os.path.join(data_dir, snapshot_file))
    with _stores_lock:
        store = _stores.get(path)
        if store is None:
            store = IdentityStore(data_dir, snapshot_file)
            store.load()
            _stores[path] = store
    store.save()
    return store


def clear_stores():
    """Forget every store opened through ``get_store``."""
    with _stores_lock:
        _stores.clear()
