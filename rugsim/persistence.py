"""
Persistence - Snapshots and fire-and-forget saving.

The engine never touches storage. After each committed tick or trade it
serializes a snapshot on its own thread and hands it to a PersistenceWorker,
which writes on a single background thread. A failed save is logged and
reported through a callback; it is never retried and never blocks a tick.

Usage:
    from rugsim.persistence import JsonFileStore, PersistenceWorker

    store = JsonFileStore("saves/game.json.gz")
    worker = PersistenceWorker(store, on_error=lambda e: print(e))
    engine = GameEngine.new_game(seed=42, persistence=worker)

    snapshot = store.load()
    engine = GameEngine.from_snapshot(snapshot)
"""
import gzip
import json
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class PersistenceError(Exception):
    """A snapshot could not be written or read."""


@dataclass
class GameSnapshot:
    """Everything needed to cold-start a game."""
    state: Dict[str, Any]
    version: int = SNAPSHOT_VERSION
    saved_at: float = field(default_factory=time.time)

    @property
    def tick(self) -> int:
        return int(self.state.get('clock', {}).get('tick', 0))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'version': self.version,
            'saved_at': self.saved_at,
            'state': self.state,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameSnapshot':
        version = int(data.get('version', 0))
        if version != SNAPSHOT_VERSION:
            raise PersistenceError(f"unsupported snapshot version {version}")
        if 'state' not in data:
            raise PersistenceError("snapshot has no state")
        return cls(state=data['state'], version=version, saved_at=float(data.get('saved_at', 0.0)))

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_json(cls, text: str) -> 'GameSnapshot':
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"corrupt snapshot: {e}") from e
        return cls.from_dict(data)


class SnapshotStore(ABC):
    """Where snapshots live."""

    @abstractmethod
    def save(self, snapshot: GameSnapshot):
        """Persist a snapshot. Raises PersistenceError."""
        pass

    @abstractmethod
    def load(self) -> Optional[GameSnapshot]:
        """Latest snapshot, or None if nothing was saved."""
        pass

    @abstractmethod
    def clear(self):
        pass


class MemoryStore(SnapshotStore):
    """Keeps the latest snapshot as JSON text."""

    def __init__(self):
        self._text: Optional[str] = None
        self.saves = 0

    def save(self, snapshot: GameSnapshot):
        self._text = snapshot.to_json()
        self.saves += 1

    def load(self) -> Optional[GameSnapshot]:
        if self._text is None:
            return None
        return GameSnapshot.from_json(self._text)

    def clear(self):
        self._text = None


class JsonFileStore(SnapshotStore):
    """
    One JSON file, gzip-compressed when the path ends in `.gz`.

    Writes go to a temp file that replaces the target, so a crash mid-write
    leaves the previous save intact.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @property
    def compressed(self) -> bool:
        return self.path.suffix == '.gz'

    def save(self, snapshot: GameSnapshot):
        tmp = self.path.with_name(self.path.name + '.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if self.compressed:
                with gzip.open(tmp, 'wt', encoding='utf-8') as f:
                    f.write(snapshot.to_json())
            else:
                with open(tmp, 'w', encoding='utf-8') as f:
                    f.write(snapshot.to_json())
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"cannot write {self.path}: {e}") from e

    def load(self) -> Optional[GameSnapshot]:
        if not self.path.exists():
            return None
        try:
            if self.compressed:
                with gzip.open(self.path, 'rt', encoding='utf-8') as f:
                    text = f.read()
            else:
                with open(self.path, 'r', encoding='utf-8') as f:
                    text = f.read()
        except OSError as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e
        return GameSnapshot.from_json(text)

    def clear(self):
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"cannot delete {self.path}: {e}") from e


class PersistenceWorker:
    """
    Background saver. `submit` returns immediately.

    Saves run one at a time in submission order; a queued snapshot is
    skipped when a newer one is already waiting behind it. Any exception a
    store raises is reported as a PersistenceError and never reaches the
    caller of `flush` or `close`.
    """

    def __init__(
        self,
        store: SnapshotStore,
        on_error: Optional[Callable[[PersistenceError], None]] = None,
    ):
        self.store = store
        self.on_error = on_error
        self.errors: List[PersistenceError] = []
        self.saved = 0
        self.skipped = 0
        self._seq = 0
        self._lock = threading.Lock()
        self._futures: List[Future] = []
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix='rugsim-save')

    def submit(self, snapshot: GameSnapshot) -> Future:
        with self._lock:
            self._seq += 1
            seq = self._seq
            self._futures = [f for f in self._futures if not f.done()]
            future = self._pool.submit(self._save, snapshot, seq)
            self._futures.append(future)
        return future

    def _save(self, snapshot: GameSnapshot, seq: int) -> bool:
        with self._lock:
            if seq < self._seq:
                self.skipped += 1
                return False
        try:
            self.store.save(snapshot)
        except Exception as e:
            if isinstance(e, PersistenceError):
                error = e
            else:
                error = PersistenceError(f"{type(e).__name__}: {e}")
                error.__cause__ = e
            logger.error(f"Snapshot save failed at tick {snapshot.tick}: {error}", exc_info=True)
            self.errors.append(error)
            if self.on_error:
                self.on_error(error)
            return False
        self.saved += 1
        logger.debug(f"Snapshot saved at tick {snapshot.tick}")
        return True

    def flush(self, timeout: Optional[float] = None):
        """Wait for queued saves. For shutdown and tests."""
        with self._lock:
            pending = list(self._futures)
        for future in pending:
            future.result(timeout=timeout)

    def close(self):
        self.flush()
        self._pool.shutdown(wait=True)
