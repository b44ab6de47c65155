from __future__ import annotations

import logging
from typing import Any, NamedTuple, Protocol

from leadform.config import Settings, ensure_dirs
from leadform.errors import MalformedConfigError
from leadform.forms import DEFAULT_FORM_CONFIG, default_form_config
from leadform.repo_json import JSONFormStore
from leadform.repo_sqlite import SQLiteFormStore

logger = logging.getLogger(__name__)

FOUND = "found"
NOT_FOUND = "not_found"
MALFORMED = "malformed"
DEFAULT = "default"


class FormStore(Protocol):
    def list_forms(self) -> list[dict[str, Any]]: ...

    def save(self, config: dict[str, Any]) -> str: ...

    def load(self, form_id: str) -> dict[str, Any] | None: ...

    def delete(self, form_id: str) -> None: ...


class Resolution(NamedTuple):
    config: dict[str, Any]
    status: str

    @property
    def fell_back(self) -> bool:
        return self.status != FOUND


def init_storage(settings: Settings) -> FormStore:
    ensure_dirs(settings)
    if settings.storage_backend == "sqlite":
        return SQLiteFormStore(settings.sqlite_path)
    return JSONFormStore(settings.json_path)


def seed_default(store: FormStore) -> bool:
    """Store the built-in configuration unless it is already there."""
    try:
        if store.load(DEFAULT_FORM_CONFIG["id"]) is not None:
            return False
    except MalformedConfigError:
        logger.warning("Stored default configuration is malformed, replacing it")
    try:
        store.save(default_form_config())
    except MalformedConfigError:
        logger.exception("Cannot seed default form configuration, store is unreadable")
        return False
    logger.info("Seeded default form configuration %s", DEFAULT_FORM_CONFIG["id"])
    return True


def resolve_form_config(store: FormStore, form_id: str | None) -> Resolution:
    if not form_id:
        return Resolution(default_form_config(), DEFAULT)
    try:
        config = store.load(form_id)
    except MalformedConfigError:
        logger.warning("Configuration %s is malformed, using default", form_id)
        return Resolution(default_form_config(), MALFORMED)
    if config is None or config.get("id") != form_id:
        logger.info("Configuration %s not found, using default", form_id)
        return Resolution(default_form_config(), NOT_FOUND)
    return Resolution(config, FOUND)
