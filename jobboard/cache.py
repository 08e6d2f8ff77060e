"""
Cache fallback store for the last known-good job list.

The snapshot lives in a single slot named ``cachedJobs``. It is written on
every successful fetch and read only when a fetch fails. Writing is best
effort: failures are logged as PersistenceWarning and never raised.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .database import CacheSlot, get_engine, get_session_factory, init_database
from .errors import PersistenceWarning
from .logger import StructuredLogger, get_logger
from .models import Job

CACHE_SLOT = "cachedJobs"


def _serialize(jobs: Sequence[Job]) -> List[Dict[str, Any]]:
    return [job.to_dict() for job in jobs]


def _deserialize(raw: Any) -> Optional[List[Job]]:
    if not isinstance(raw, list):
        return None
    return [Job.from_dict(item) for item in raw if isinstance(item, dict)]


class JobCache:
    """Common save/load contract; subclasses provide the slot I/O."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or get_logger()

    def save(self, jobs: Sequence[Job]) -> bool:
        """Persist the snapshot. Returns False instead of raising on failure."""
        try:
            self._write(json.dumps(_serialize(jobs), ensure_ascii=False))
        except (OSError, TypeError, ValueError, SQLAlchemyError) as e:
            self.logger.record_cache_write(ok=False)
            self.logger.warning(
                "Could not cache jobs",
                category=PersistenceWarning.__name__,
                error=str(e),
                backend=type(self).__name__,
            )
            return False
        self.logger.record_cache_write()
        self.logger.debug("Cached jobs", count=len(jobs))
        return True

    def load(self) -> Optional[List[Job]]:
        """Return the cached jobs, or None when there is no usable snapshot."""
        try:
            content = self._read()
        except (OSError, SQLAlchemyError) as e:
            self.logger.warning("Could not read job cache", error=str(e), backend=type(self).__name__)
            return None
        if not content:
            return None
        try:
            jobs = _deserialize(json.loads(content))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            self.logger.warning("Discarding corrupt job cache", error=str(e))
            return None
        if jobs is not None:
            self.logger.record_cache_hit()
        return jobs

    def close(self) -> None:
        """Release any held resources. The cache stays usable afterwards."""

    def _write(self, payload: str) -> None:
        raise NotImplementedError

    def _read(self) -> Optional[str]:
        raise NotImplementedError


class JsonFileCache(JobCache):
    """Snapshot stored as {"cachedJobs": [...]} in a JSON file."""

    def __init__(self, path: Path, logger: Optional[StructuredLogger] = None):
        super().__init__(logger)
        self.path = Path(path)

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            f.write(f'{{"{CACHE_SLOT}": {payload}}}')
        tmp.replace(self.path)

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
        if not content:
            return None
        try:
            store = json.loads(content)
        except json.JSONDecodeError:
            self.logger.warning("Discarding corrupt job cache file", path=str(self.path))
            return None
        if not isinstance(store, dict) or CACHE_SLOT not in store:
            return None
        return json.dumps(store[CACHE_SLOT])


class SqliteCache(JobCache):
    """Snapshot stored in the cache_slots table of a SQLite database.

    The engine is created on first use and kept until close().
    """

    def __init__(self, db_path: Path, logger: Optional[StructuredLogger] = None):
        super().__init__(logger)
        self.db_path = Path(db_path)
        self._engine: Optional[Engine] = None
        self._session_factory = None

    def _session(self):
        if self._session_factory is None:
            engine = get_engine(self.db_path)
            try:
                init_database(self.db_path, engine)
            except SQLAlchemyError:
                engine.dispose()
                raise
            self._engine = engine
            self._session_factory = get_session_factory(engine)
        return self._session_factory()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def _write(self, payload: str) -> None:
        session = self._session()
        try:
            slot = session.get(CacheSlot, CACHE_SLOT)
            if slot is None:
                session.add(CacheSlot(key=CACHE_SLOT, payload=payload, updated_at=datetime.now()))
            else:
                slot.payload = payload
                slot.updated_at = datetime.now()
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        finally:
            session.close()

    def _read(self) -> Optional[str]:
        if not self.db_path.exists():
            return None
        session = self._session()
        try:
            slot = session.get(CacheSlot, CACHE_SLOT)
            return slot.payload if slot is not None else None
        finally:
            session.close()


def build_cache(backend: str, path: Path, logger: Optional[StructuredLogger] = None) -> JobCache:
    if backend == "json":
        return JsonFileCache(path, logger=logger)
    if backend == "sqlite":
        return SqliteCache(path, logger=logger)
    raise ValueError(f"Unsupported cache backend: {backend}")
