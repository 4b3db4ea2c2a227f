from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.json"

DEFAULTS = {
    "api_url": "http://localhost:5000/api",
    "language": "en",
    "api_token": "",
    "request_timeout": 30.0,
}

ENV_OVERRIDES = {
    "QUIZDESK_API_URL": "api_url",
    "QUIZDESK_API_TOKEN": "api_token",
}


@dataclass
class Settings:
    api_url: str = DEFAULTS["api_url"]
    language: str = DEFAULTS["language"]
    api_token: str = DEFAULTS["api_token"]
    request_timeout: float = DEFAULTS["request_timeout"]

    def to_dict(self) -> dict:
        return {
            "api_url": self.api_url,
            "language": self.language,
            "api_token": self.api_token,
            "request_timeout": self.request_timeout,
        }


def load_settings() -> Settings:
    raw: dict = {}
    if CONFIG_PATH.exists():
        raw = json.loads(CONFIG_PATH.read_text())
    known = {f.name for f in Settings.__dataclass_fields__.values()}
    filtered = {k: v for k, v in raw.items() if k in known}
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            filtered[key] = value
    return Settings(**filtered)


def save_settings(settings: Settings) -> None:
    CONFIG_PATH.write_text(json.dumps(settings.to_dict(), indent=4) + "\n")
