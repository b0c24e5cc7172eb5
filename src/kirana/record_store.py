"""Local persistent record store for kirana."""

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from .errors import (
    DeleteError,
    OpenError,
    ReadError,
    UnknownPartitionError,
    VersionBlockedError,
    WriteError,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# Centralized storage constants
# Can be overridden via KIRANA_DATA_DIR / KIRANA_DB_NAME environment variables
_default_data_dir = Path(__file__).parent.parent.parent / "data"
DATA_DIR = Path(os.environ.get("KIRANA_DATA_DIR", _default_data_dir))
DB_NAME = os.environ.get("KIRANA_DB_NAME", "KiranaStoreDB")

PRODUCTS = "products"
CUSTOMERS = "customers"
ORDERS = "orders"

Record = dict[str, Any]


@dataclass(frozen=True)
class PartitionSchema:
    """Declaration of one partition: its name, primary key field and indexes."""

    name: str
    key_path: str = "id"
    indexes: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key_path": self.key_path,
            "indexes": list(self.indexes),
            "records": {},
        }


# Secondary indexes are declared for forward compatibility; nothing queries them.
PARTITIONS: tuple[PartitionSchema, ...] = (
    PartitionSchema(PRODUCTS, indexes=("category",)),
    PartitionSchema(CUSTOMERS),
    PartitionSchema(ORDERS, indexes=("date",)),
)


class RecordStore:
    """
    Versioned key-value store with named partitions, persisted as one JSON document.

    Each mutating call runs a locked read-modify-write of the document and
    replaces it atomically, so a single put or delete never interleaves with
    another process. Sequences of calls are not coordinated.
    """

    def __init__(
        self,
        data_dir: Path | None = None,
        name: str = DB_NAME,
        version: int = SCHEMA_VERSION,
        partitions: tuple[PartitionSchema, ...] = PARTITIONS,
    ):
        """
        Initialize RecordStore.

        Args:
            data_dir: Override data directory (for testing).
            name: Database name; the document is stored as <name>.json.
            version: Schema version this handle requires.
            partitions: Partition declarations applied on creation or upgrade.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.name = name
        self.version = version
        self.partitions = {p.name: p for p in partitions}
        self.path = self.data_dir / f"{name}.json"
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def exists(self) -> bool:
        """Check if the database document exists."""
        return self.path.exists()

    # --- Lifecycle ---

    def open(self) -> "RecordStore":
        """
        Open the database, creating or upgrading it as needed.

        Opening an already open handle is a no-op. Partition declarations are
        only applied when the document is created or when its version is
        older than the one this handle requires.

        Raises:
            OpenError: If the storage location is unusable.
            VersionBlockedError: If the document is newer than this handle.
        """
        if self._open:
            return self

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OpenError(str(self.path), str(e)) from e

        try:
            with self._lock():
                if self.exists():
                    data = self._load_for_open()
                    found = data.get("version", 0)
                    if found > self.version:
                        raise VersionBlockedError(str(self.path), found, self.version)
                    if found < self.version:
                        self._upgrade(data, found)
                else:
                    self._create()
        except OSError as e:
            raise OpenError(str(self.path), str(e)) from e

        self._open = True
        logger.info("Opened database", extra={"db": self.name, "version": self.version})
        return self

    def close(self) -> None:
        """Release the handle. Later operations fail until reopened."""
        self._open = False

    def _create(self) -> None:
        data = {
            "name": self.name,
            "version": self.version,
            "partitions": {name: p.to_dict() for name, p in self.partitions.items()},
        }
        self._save_for_open(data)
        logger.info("Created database", extra={"db": self.name, "path": str(self.path)})

    def _upgrade(self, data: dict[str, Any], old_version: int) -> None:
        """Bump the version and declare any partitions missing from the document."""
        existing = data.setdefault("partitions", {})
        added = []
        for name, schema in self.partitions.items():
            if name not in existing:
                existing[name] = schema.to_dict()
                added.append(name)
        data["version"] = self.version
        self._save_for_open(data)
        logger.info(
            "Upgraded database",
            extra={
                "db": self.name,
                "from_version": old_version,
                "to_version": self.version,
                "added_partitions": added,
            },
        )

    def _load_for_open(self) -> dict[str, Any]:
        try:
            data = self._load_data()
        except (OSError, ValueError) as e:
            raise OpenError(str(self.path), str(e)) from e
        if not isinstance(data, dict) or not isinstance(data.get("partitions", {}), dict):
            raise OpenError(str(self.path), "malformed database document")
        return data

    def _save_for_open(self, data: dict[str, Any]) -> None:
        try:
            self._save_data(data)
        except OSError as e:
            raise OpenError(str(self.path), str(e)) from e

    # --- Storage primitives ---

    @contextmanager
    def _lock(self) -> Iterator[None]:
        """Acquire exclusive lock on the database for read-modify-write operations."""
        lock_path = self.data_dir / f".{self.name}.lock"
        with open(lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _load_data(self) -> dict[str, Any]:
        """Load the database document from disk."""
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save_data(self, data: dict[str, Any]) -> None:
        """Save the database document to disk atomically."""
        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{self.name}_", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self.path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def _ensure_open(self) -> None:
        if not self._open:
            raise OpenError(str(self.path), "database is not open")

    def _records(self, data: dict[str, Any], partition: str) -> dict[str, Record]:
        """Return the records map of a partition in a loaded document."""
        partitions = data.get("partitions", {})
        if partition not in partitions:
            raise UnknownPartitionError(partition)
        return partitions[partition].setdefault("records", {})

    def _key_path(self, data: dict[str, Any], partition: str) -> str:
        return data["partitions"][partition].get("key_path", "id")

    # --- Operations ---

    def get_all(self, partition: str) -> list[Record]:
        """
        Return every record in a partition.

        An empty partition yields an empty list. Records come back in the
        order they were first inserted.

        Raises:
            ReadError: If the partition is unknown or storage is unreadable.
        """
        self._ensure_open()
        try:
            data = self._load_data()
            return list(self._records(data, partition).values())
        except (OSError, ValueError, UnknownPartitionError) as e:
            raise ReadError(partition, str(e)) from e

    def get(self, partition: str, key: str) -> Record | None:
        """
        Return a single record, or None if no record has that key.

        Raises:
            ReadError: If the partition is unknown or storage is unreadable.
        """
        self._ensure_open()
        try:
            data = self._load_data()
            return self._records(data, partition).get(key)
        except (OSError, ValueError, UnknownPartitionError) as e:
            raise ReadError(partition, str(e)) from e

    def count(self, partition: str) -> int:
        """Return the number of records in a partition."""
        return len(self.get_all(partition))

    def put(self, partition: str, record: Record) -> None:
        """
        Insert or replace a record keyed by its primary key.

        This is always a full-record overwrite; fields absent from the new
        record are gone afterwards.

        Raises:
            WriteError: If the record cannot be serialized, lacks its key,
                or the partition is unknown.
        """
        self._ensure_open()
        try:
            # Detach from the caller's object and fail before touching disk
            encoded = json.loads(json.dumps(record))
        except (TypeError, ValueError) as e:
            raise WriteError(partition, f"record is not serializable: {e}") from e

        try:
            with self._lock():
                data = self._load_data()
                records = self._records(data, partition)
                key_path = self._key_path(data, partition)
                key = encoded.get(key_path) if isinstance(encoded, dict) else None
                if not isinstance(key, str) or not key:
                    raise WriteError(partition, f"record has no '{key_path}' key")
                records[key] = encoded
                self._save_data(data)
        except (OSError, ValueError, UnknownPartitionError) as e:
            raise WriteError(partition, str(e)) from e

        logger.debug("Saved record", extra={"partition": partition, "key": key})

    def delete(self, partition: str, key: str) -> None:
        """
        Remove the record with the given key. Missing keys are not an error.

        Raises:
            DeleteError: If the partition is unknown or storage is unusable.
        """
        self._ensure_open()
        try:
            with self._lock():
                data = self._load_data()
                records = self._records(data, partition)
                if records.pop(key, None) is None:
                    return
                self._save_data(data)
        except (OSError, ValueError, UnknownPartitionError) as e:
            raise DeleteError(partition, str(e)) from e

        logger.debug("Deleted record", extra={"partition": partition, "key": key})

    def describe(self) -> dict[str, Any]:
        """
        Describe the on-disk layout: name, version, and per-partition key
        path, indexes and record count.
        """
        self._ensure_open()
        try:
            data = self._load_data()
        except (OSError, ValueError) as e:
            raise ReadError(self.name, str(e)) from e
        return {
            "name": data.get("name", self.name),
            "version": data.get("version", 0),
            "path": str(self.path),
            "partitions": {
                name: {
                    "key_path": p.get("key_path", "id"),
                    "indexes": p.get("indexes", []),
                    "count": len(p.get("records", {})),
                }
                for name, p in data.get("partitions", {}).items()
            },
        }
