from __future__ import annotations

import os
import re
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

FIELD_TYPES = ("text", "email", "number", "textarea", "select", "checkbox", "radio")
OPTION_TYPES = {"select", "radio", "checkbox"}
FREE_TEXT_TYPES = {"text", "textarea"}
FIELD_ID_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")

EMBED_WIDTH = "100%"
EMBED_HEIGHT = "600"
DYNAMIC_FORM_PATH = "/embed/dynamic-form"
DYNAMIC_FORM_SHORTCODE = "dynamic_form"


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.storage_backend = os.getenv("STORAGE_BACKEND", "json").lower()
        self.json_path = Path(os.getenv("JSON_PATH", "./data/forms.json"))
        self.sqlite_path = Path(os.getenv("SQLITE_PATH", "./data/forms.db"))
        self.base_url = os.getenv("BASE_URL", "").rstrip("/")
        self.webhook_timeout = _float_env("WEBHOOK_TIMEOUT", 10.0)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.host = os.getenv("HOST", "0.0.0.0")
        port_value = os.getenv("PORT", "8000")
        try:
            self.port = int(port_value)
        except ValueError:
            self.port = 8000


def ensure_dirs(settings: Settings) -> None:
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)
    settings.sqlite_path.parent.mkdir(parents=True, exist_ok=True)
