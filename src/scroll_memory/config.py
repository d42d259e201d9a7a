"""User settings, persisted as a small JSON object with camelCase keys."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .flush import SAFE_DB_FLUSH_INTERVAL_MS


DEFAULT_DB_FILE_NAME = ".scroll_memory/scroll-positions.json"
DEFAULT_SETTINGS_FILE = Path(".scroll_memory") / "data.json"

MAX_DELAY_AFTER_FILE_OPENING_MS = 300


class ScrollMemoryConfig(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    db_file_name: str = Field(default=DEFAULT_DB_FILE_NAME, alias="dbFileName", min_length=1)
    delay_after_file_opening: int = Field(default=100, alias="delayAfterFileOpening")
    save_timer: int = Field(default=SAFE_DB_FLUSH_INTERVAL_MS, alias="saveTimer")

    @field_validator("delay_after_file_opening", mode="after")
    @classmethod
    def _clamp_delay(cls, v: int) -> int:
        return min(max(v, 0), MAX_DELAY_AFTER_FILE_OPENING_MS)

    @field_validator("save_timer", mode="after")
    @classmethod
    def _floor_save_timer(cls, v: int) -> int:
        return max(v, SAFE_DB_FLUSH_INTERVAL_MS)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


def load_settings(path: Path) -> ScrollMemoryConfig:
    """Stored settings merged over the defaults; defaults if the file is unusable."""
    if not path.is_file():
        return ScrollMemoryConfig()
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to read settings (using defaults): {path}: {e}")
        return ScrollMemoryConfig()
    if not isinstance(payload, dict):
        logger.warning(f"Expected JSON object but got {type(payload).__name__}: {path}")
        return ScrollMemoryConfig()
    try:
        return ScrollMemoryConfig.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Invalid settings (using defaults): {path}: {e}")
        return ScrollMemoryConfig()


def save_settings(path: Path, config: ScrollMemoryConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_json(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
