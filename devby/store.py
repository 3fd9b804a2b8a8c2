"""JSON file store for scraped company records.

The store keeps every record in memory, in order, and writes the whole
collection back to its file on flush(). Records are plain JSON dicts keyed
by their ``url`` field.

The store does not enforce url uniqueness itself. The retry pipeline checks
contains() before every fetch and is the only writer during a run.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from devby.common.exceptions import CorruptStoreException
from devby.common.sorting import SortSpec, sort_items

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class JsonStore:
    """Ordered collection of records backed by a JSON array file.

    Example::

        store = JsonStore.load(Path("companies.json"))
        if not store.contains(url):
            store.append(record)
            store.flush()
    """

    def __init__(self, path: Path, records: list[Record] | None = None) -> None:
        self.path = Path(path)
        self._records: list[Record] = []
        self._urls: set[str] = set()
        for record in records or []:
            self.append(record)

    # ------------------------------------------------------------------
    # Opening
    # ------------------------------------------------------------------

    @staticmethod
    def exists(path: Path) -> bool:
        return Path(path).exists()

    @classmethod
    def empty(cls, path: Path) -> JsonStore:
        """An empty store. Nothing is written until the first flush()."""
        return cls(path)

    @classmethod
    def reset(cls, path: Path) -> JsonStore:
        """Truncate the file to an empty collection and persist immediately."""
        store = cls(path)
        store.flush()
        logger.info(f"Reset output file {path}")
        return store

    @classmethod
    def load(cls, path: Path) -> JsonStore:
        """Load previously persisted records.

        Raises:
            FileNotFoundError: If the file does not exist.
            CorruptStoreException: If the file is not a JSON array of
                objects that each carry a string ``url``.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            raise CorruptStoreException(path, f"not UTF-8 text ({e.reason})") from e
        except json.JSONDecodeError as e:
            raise CorruptStoreException(path, f"JSON is invalid ({e})") from e

        if not isinstance(data, list):
            raise CorruptStoreException(path, "expected a JSON array")
        for position, record in enumerate(data):
            if not isinstance(record, dict) or not isinstance(
                record.get("url"), str
            ):
                raise CorruptStoreException(
                    path, f"entry {position} is not a record with a url"
                )

        logger.info(f"Loaded {len(data)} records from {path}")
        return cls(path, data)

    # ------------------------------------------------------------------
    # Collection operations
    # ------------------------------------------------------------------

    def contains(self, url: str) -> bool:
        return url in self._urls

    def get(self, url: str) -> Record | None:
        for record in self._records:
            if record["url"] == url:
                return record
        return None

    def append(self, record: Record) -> None:
        """Add a record in memory. Call flush() to persist it."""
        self._records.append(record)
        self._urls.add(record["url"])

    def sort_in_place(self, spec: SortSpec) -> None:
        self._records = sort_items(self._records, spec)

    def flush(self) -> None:
        """Write the whole collection to the file, replacing it atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._records, f, ensure_ascii=False, indent=2)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug(f"Flushed {len(self._records)} records to {self.path}")

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(list(self._records))
