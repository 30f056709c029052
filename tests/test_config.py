"""Tests for src/aether_crawl/config.py."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from aether_crawl.config import DEFAULT_CONFIG_PATH, GameSettings, load_settings
from aether_crawl.models.enums import Difficulty


def write_config(tmp_path, text: str):
    path = tmp_path / "config.toml"
    path.write_text(text)
    return path


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "absent.toml")
        assert settings == GameSettings()
        assert settings.max_rounds == 6
        assert settings.difficulty == Difficulty.NORMAL

    def test_reads_tables(self, tmp_path):
        path = write_config(tmp_path, """
[game]
difficulty = "Hard"
max_rounds = 4
xp_multiplier = 1.5

[llm]
provider = "local"
model = "mistral"
timeout_seconds = 30
""")
        settings = load_settings(path)
        assert settings.difficulty == Difficulty.HARD
        assert settings.max_rounds == 4
        assert settings.xp_multiplier == 1.5
        assert settings.llm.provider == "local"
        assert settings.llm.timeout_seconds == 30
        assert settings.theme == "Dark Fantasy"

    def test_overrides_win(self, tmp_path):
        path = write_config(tmp_path, '[game]\ndifficulty = "Easy"\n')
        settings = load_settings(path, difficulty=Difficulty.EXTREME, theme=None)
        assert settings.difficulty == Difficulty.EXTREME
        assert settings.theme == "Dark Fantasy"

    @pytest.mark.parametrize("body", [
        '[game]\nmax_rounds = 0\n',
        '[game]\ndifficulty = "Impossible"\n',
        '[game]\nenemy_hp_multiplier = 0\n',
    ])
    def test_invalid_values(self, tmp_path, body, caplog):
        with pytest.raises(ValidationError):
            load_settings(write_config(tmp_path, body))
        assert "Invalid settings" in caplog.text

    def test_shipped_config(self):
        assert DEFAULT_CONFIG_PATH.name == "config.toml"
        settings = load_settings()
        assert settings.max_rounds >= 1
