"""Ledger of submitted applications, keyed by listing link.

The ledger is read once at start and appended to after every successful
submission. Each append is written through to the backend immediately so a
crash mid-run keeps everything applied so far.
"""
from __future__ import annotations

import fcntl
import json
import os
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from autoapply.config import APPLIED_PATH
from autoapply.log import get_logger
from autoapply.models import ApplicationRecord

log = get_logger(__name__)


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class LedgerBackend(ABC):
    @abstractmethod
    def load(self) -> list[dict[str, Any]]:
        """Raw records; an unreadable store yields an empty list."""

    @abstractmethod
    def save(self, records: list[dict[str, Any]]) -> None:
        """Replace the stored records. May raise OSError."""


class JsonFileBackend(LedgerBackend):
    """JSON array on disk. Readers and the writer serialize on ``<path>.lock``."""

    def __init__(self, path: Path = APPLIED_PATH) -> None:
        self.path = path
        self.lock_path = path.with_suffix(path.suffix + ".lock")

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        with open(self.lock_path, "a", encoding="utf-8") as lock_file:
            _lock(lock_file, exclusive=exclusive)
            try:
                yield
            finally:
                _unlock(lock_file)

    def load(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self._locked(exclusive=False), open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            log.warning("Ignoring unreadable %s: %s", self.path.name, exc)
            return []
        return data if isinstance(data, list) else []

    def save(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with self._locked(exclusive=True):
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)


class MemoryBackend(LedgerBackend):
    def __init__(self, records: list[dict[str, Any]] | None = None) -> None:
        self.records: list[dict[str, Any]] = list(records or [])
        self.saves = 0

    def load(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self.records]

    def save(self, records: list[dict[str, Any]]) -> None:
        self.records = [dict(r) for r in records]
        self.saves += 1


class Ledger:
    def __init__(self, backend: LedgerBackend | None = None) -> None:
        self.backend = backend or JsonFileBackend()
        self._records: dict[str, ApplicationRecord] = {}

    def load(self) -> Ledger:
        self._records.clear()
        for raw in self.backend.load():
            if not isinstance(raw, dict) or not raw.get("link"):
                continue
            record = ApplicationRecord.from_dict(raw)
            self._records.setdefault(record.link, record)
        log.info("Ledger: %d application(s) on record", len(self._records))
        return self

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, link: object) -> bool:
        return link in self._records

    def contains(self, link: str) -> bool:
        return link in self._records

    def records(self) -> list[ApplicationRecord]:
        return list(self._records.values())

    def append(self, record: ApplicationRecord) -> bool:
        """Add *record* unless its link is already present; persist on change.

        Returns ``False`` for a duplicate. A failed write is logged and the
        record stays in memory, so later appends retry the whole file.
        """
        if record.link in self._records:
            log.debug("Already on record: %s", record.link)
            return False
        self._records[record.link] = record
        try:
            self.backend.save([r.to_dict() for r in self._records.values()])
        except OSError as exc:
            log.warning("Unable to write application ledger: %s", exc)
        else:
            log.info("Saved to ledger: %s", record.title or record.link)
        return True
