"""Persistence store: whole-collection snapshots keyed by name"""
import copy
import json
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column, DateTime, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from finbot.config import Settings
from finbot.errors import PersistenceWriteFailure
from finbot.logger import ErrorType, create_logger

logger = create_logger("database")

# Collection names
ENTRIES = "entries"
CATEGORIES = "categories"
BUDGETS = "budgets"
ALLOWLIST = "allowlist"
OWNER_BINDING = "ownerBinding"

COLLECTIONS = (ENTRIES, CATEGORIES, BUDGETS, ALLOWLIST, OWNER_BINDING)

# File names written by the first version of the bot
LEGACY_FILENAMES = {
    ENTRIES: "gastos.json",
    CATEGORIES: "categorias.json",
    BUDGETS: "orcamentos.json",
    ALLOWLIST: "contatos_permitidos.json",
    OWNER_BINDING: "chat_proprio.json",
}


def _utc_now():
    """Return current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class CollectionStore:
    """
    Durable key-value store of JSON-shaped collections.

    Every save overwrites the whole collection. A failed write is logged and
    reported through the return value; it never raises to the caller.

    A collection that exists but cannot be read is listed in `unreadable`
    until a later save replaces it, so startup never writes defaults over it.
    """

    def __init__(self):
        self.failed_writes: List[str] = []
        self.unreadable: List[str] = []

    def load(self, name: str) -> Optional[Any]:
        """Return the stored value, or None when absent or unreadable"""
        try:
            return self._read(name)
        except Exception as e:
            logger.error("Failed to load collection", {
                "collection": name,
                "error_type": ErrorType.STORAGE_ERROR.value,
                "error": str(e),
            })
            if name not in self.unreadable:
                self.unreadable.append(name)
            return None

    def save(self, name: str, value: Any) -> bool:
        try:
            self._write(name, value)
        except PersistenceWriteFailure as e:
            logger.error("Failed to save collection", {
                "collection": name,
                "error_type": ErrorType.STORAGE_ERROR.value,
                "error": e.reason,
            })
            self.failed_writes.append(name)
            return False
        if name in self.unreadable:
            self.unreadable.remove(name)
        logger.debug("Collection saved", {"collection": name})
        return True

    def drain_failures(self) -> List[str]:
        """Return and forget the names of collections whose last writes failed"""
        failures, self.failed_writes = self.failed_writes, []
        return failures

    def close(self) -> None:
        pass

    def _read(self, name: str) -> Optional[Any]:
        raise NotImplementedError

    def _write(self, name: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(CollectionStore):
    """Ephemeral store; snapshots are deep-copied so callers cannot alias them"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.collections: Dict[str, Any] = copy.deepcopy(initial or {})

    def _read(self, name: str) -> Optional[Any]:
        return copy.deepcopy(self.collections.get(name))

    def _write(self, name: str, value: Any) -> None:
        self.collections[name] = copy.deepcopy(value)


class JsonFileStore(CollectionStore):
    """
    One indented `<name>.json` file per collection.

    When `<name>.json` does not exist yet, the file the first version of the
    bot wrote (`gastos.json`, ...) is read instead; saves always go to the new
    name. A file that fails to decode is copied to `<file>.corrupt` before the
    error propagates.
    """

    def __init__(self, data_dir: Path):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self.data_dir / f"{name}.json"

    def _source_for(self, name: str) -> Optional[Path]:
        path = self.path_for(name)
        if path.exists():
            return path
        legacy = LEGACY_FILENAMES.get(name)
        if legacy and (self.data_dir / legacy).exists():
            return self.data_dir / legacy
        return None

    def _read(self, name: str) -> Optional[Any]:
        path = self._source_for(name)
        if path is None:
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            shutil.copyfile(path, path.with_name(f"{path.name}.corrupt"))
            raise

    def _write(self, name: str, value: Any) -> None:
        path = self.path_for(name)
        tmp_path = path.with_name(f"{path.name}.tmp")
        try:
            payload = json.dumps(value, indent=2, ensure_ascii=False)
            tmp_path.write_text(payload, encoding="utf-8")
            # atomic replace
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceWriteFailure(name, str(e)) from e


Base = declarative_base()


class CollectionSnapshot(Base):
    """Latest snapshot of one named collection"""
    __tablename__ = "collections"

    name = Column(String(64), primary_key=True)
    payload = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=_utc_now, onupdate=_utc_now, nullable=False)


class SqlCollectionStore(CollectionStore):
    """Collections stored as JSON rows through SQLAlchemy"""

    def __init__(self, database_url: str):
        super().__init__()
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args = {"check_same_thread": False}
        self.engine = create_engine(database_url, echo=False, connect_args=connect_args)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        Base.metadata.create_all(bind=self.engine)

    def _read(self, name: str) -> Optional[Any]:
        db = self.SessionLocal()
        try:
            snapshot = db.get(CollectionSnapshot, name)
            return snapshot.payload if snapshot else None
        finally:
            db.close()

    def _write(self, name: str, value: Any) -> None:
        db = self.SessionLocal()
        try:
            snapshot = db.get(CollectionSnapshot, name)
            if snapshot:
                snapshot.payload = value
                snapshot.updated_at = _utc_now()
            else:
                db.add(CollectionSnapshot(name=name, payload=value))
            db.commit()
        except Exception as e:
            db.rollback()
            raise PersistenceWriteFailure(name, str(e)) from e
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()


def create_store(settings: Settings) -> CollectionStore:
    """Build the store selected by STORAGE_BACKEND"""
    if settings.storage_backend == "sql":
        return SqlCollectionStore(settings.database_url)
    if settings.storage_backend == "memory":
        return MemoryStore()
    return JsonFileStore(settings.data_dir)
