from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable

from filelock import FileLock
from tinydb import Query, TinyDB

from leadform.errors import MalformedConfigError
from leadform.forms import parse_form_config, stamp_for_save

logger = logging.getLogger(__name__)


class JSONFormStore:
    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = FileLock(f"{path}.lock")

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            except ValueError as exc:
                # corrupted document
                raise MalformedConfigError(f"cannot read {self._path}") from exc
            finally:
                db.close()

    def list_forms(self) -> list[dict[str, Any]]:
        try:
            with self._db() as db:
                items = db.table("forms").all()
        except MalformedConfigError:
            logger.warning("Form store %s is unreadable, listing nothing", self._path)
            return []
        forms: list[dict[str, Any]] = []
        for item in items:
            try:
                forms.append(parse_form_config(dict(item)))
            except MalformedConfigError:
                logger.warning("Skipping malformed configuration %s", item.get("id"))
                continue
        return sorted(forms, key=lambda x: str(x.get("updated_at") or ""), reverse=True)

    def load(self, form_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().id == form_id)
        if item is None:
            return None
        return parse_form_config(dict(item))

    def save(self, config: dict[str, Any]) -> str:
        with self._db() as db:
            table = db.table("forms")
            existing = table.get(Query().id == config.get("id")) if config.get("id") else None
            record = stamp_for_save(config, existing=dict(existing) if existing else None)
            table.upsert(record, Query().id == record["id"])
        return record["id"]

    def delete(self, form_id: str) -> None:
        with self._db() as db:
            db.table("forms").remove(Query().id == form_id)
