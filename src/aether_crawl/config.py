"""Game settings loaded from config.toml and validated with pydantic."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aether_crawl.models.enums import Difficulty

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"

# 5 rounds + 1 boss
DEFAULT_MAX_ROUNDS = 6


class LLMSettings(BaseModel):
    provider: str = "openrouter"  # openrouter | openai | local
    model: str = "google/gemini-2.0-flash-001"
    base_url: str = "http://localhost:11434/v1"
    api_key: Optional[str] = None
    timeout_seconds: float = 60.0
    temperature: float = 0.8


class GameSettings(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    difficulty: Difficulty = Difficulty.NORMAL
    theme: str = "Dark Fantasy"
    language: str = "English"
    xp_multiplier: float = Field(default=1.0, ge=0)
    loot_chance_multiplier: float = Field(default=1.0, ge=0)
    enemy_hp_multiplier: float = Field(default=1.0, gt=0)
    max_rounds: int = Field(default=DEFAULT_MAX_ROUNDS, ge=1)
    llm: LLMSettings = Field(default_factory=LLMSettings)


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_settings(path: Path | str | None = None, **overrides: Any) -> GameSettings:
    """Load settings from a TOML file; a missing file yields the defaults.

    The ``[game]`` table holds the tuning knobs, ``[llm]`` the text-generation
    provider. Keyword overrides win over the file.
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    raw = _read_toml(config_path)
    data: dict[str, Any] = dict(raw.get("game", {}))
    if "llm" in raw:
        data["llm"] = raw["llm"]
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return GameSettings.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid settings in {config_path}: {e}")
        raise
