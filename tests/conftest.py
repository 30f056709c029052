"""Shared fixtures for the Aether Crawl test suite."""
from __future__ import annotations

import random
from typing import Any, Iterable

import pytest

from aether_crawl.config import GameSettings
from aether_crawl.llm.provider import LLMProvider
from aether_crawl.mechanics.character_creation import create_player, get_preset
from aether_crawl.mechanics.encounters import FALLBACK_ENEMY_FLAVOR, build_enemy
from aether_crawl.models.character import Enemy, Player


class ScriptedRandom(random.Random):
    """A ``random.Random`` whose draws are fixed up front.

    ``random()`` pops from ``randoms`` (0.99 once exhausted, so percentage
    procs fail), ``randint`` pops from ``randints`` (the lower bound once
    exhausted), ``uniform`` always returns ``uniform`` and ``choice`` picks
    the first element.
    """

    def __init__(self, randoms: Iterable[float] = (), randints: Iterable[int] = (), uniform: float = 1.0):
        super().__init__(0)
        self.randoms = list(randoms)
        self.randints = list(randints)
        self.fixed_uniform = uniform

    def random(self) -> float:
        return self.randoms.pop(0) if self.randoms else 0.99

    def randint(self, a: int, b: int) -> int:
        return self.randints.pop(0) if self.randints else a

    def uniform(self, a: float, b: float) -> float:
        return self.fixed_uniform

    def choice(self, seq):
        return seq[0]


class FakeLLM(LLMProvider):
    """Provider returning canned structured replies, recording every prompt."""

    def __init__(self, replies: Iterable[dict[str, Any]] = (), fail: bool = False):
        self.replies = list(replies)
        self.fail = fail
        self.prompts: list[str] = []

    def generate(self, prompt, system_prompt=None, temperature=0.8, max_tokens=1024) -> str:
        return ""

    def generate_structured(self, prompt, system_prompt=None, temperature=0.7, max_tokens=512) -> dict[str, Any]:
        self.prompts.append(prompt)
        if self.fail:
            raise RuntimeError("provider exploded")
        return self.replies.pop(0) if self.replies else {}

    def is_available(self) -> bool:
        return True

    @property
    def model_name(self) -> str:
        return "fake-model"


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings()


@pytest.fixture
def warrior() -> Player:
    """Level-1 warrior: STR 16 / DEX 12 / INT 8 / CON 14, 90 HP, AC 16."""
    return create_player(get_preset("warrior"))


@pytest.fixture
def glitch_enemy(settings) -> Enemy:
    """Round-1 minion scaled to a 90 HP level-1 player: 72 HP, AC 15, FLESH."""
    return build_enemy(FALLBACK_ENEMY_FLAVOR, 1, 1, 90, settings)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def seeded_rng():
    state = random.getstate()
    random.seed(42)
    yield
    random.setstate(state)
