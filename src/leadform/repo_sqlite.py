from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import orjson
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from leadform.errors import MalformedConfigError
from leadform.forms import parse_form_config, stamp_for_save
from leadform.models import Base, FormModel
from leadform.utils import dumps_json, loads_json, parse_dt

logger = logging.getLogger(__name__)


class SQLiteFormStore:
    def __init__(self, path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{path}", future=True)
        self._Session = sessionmaker(bind=self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)

    def list_forms(self) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = session.query(FormModel).order_by(FormModel.updated_at.desc()).all()
        forms: list[dict[str, Any]] = []
        for row in rows:
            try:
                forms.append(self._to_dict(row))
            except MalformedConfigError:
                logger.warning("Skipping malformed configuration %s", row.id)
                continue
        return forms

    def load(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
        return self._to_dict(row) if row else None

    def save(self, config: dict[str, Any]) -> str:
        with self._Session() as session:
            row = session.get(FormModel, config["id"]) if config.get("id") else None
            existing = self._stored_record(row) if row else None
            record = stamp_for_save(config, existing=existing)
            if row is None:
                row = FormModel(id=record["id"])
                session.add(row)
            row.title = record.get("title", "")
            row.config_json = dumps_json(record)
            row.created_at = parse_dt(record["created_at"])
            row.updated_at = parse_dt(record["updated_at"])
            session.commit()
        return record["id"]

    def delete(self, form_id: str) -> None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if row:
                session.delete(row)
                session.commit()

    @staticmethod
    def _stored_record(row: FormModel) -> dict[str, Any] | None:
        try:
            stored = loads_json(row.config_json)
        except orjson.JSONDecodeError:
            return None
        return stored if isinstance(stored, dict) else None

    @staticmethod
    def _to_dict(row: FormModel) -> dict[str, Any]:
        try:
            raw = loads_json(row.config_json)
        except orjson.JSONDecodeError as exc:
            raise MalformedConfigError(f"configuration {row.id} is not valid JSON") from exc
        return parse_form_config(raw)
