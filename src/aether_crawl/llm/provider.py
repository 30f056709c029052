"""Abstract text-generation provider used by the narration and flavor layers."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class LLMProvider(ABC):
    """Implementations must never raise from ``generate``; an empty string
    signals failure so callers can fall back to templated text."""

    @abstractmethod
    def generate(self, prompt: str, system_prompt: str | None = None,
                 temperature: float = 0.8, max_tokens: int = 1024) -> str: ...

    @abstractmethod
    def generate_structured(self, prompt: str, system_prompt: str | None = None,
                            temperature: float = 0.7, max_tokens: int = 512) -> dict[str, Any]: ...

    @abstractmethod
    def is_available(self) -> bool: ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...

    def describe(self) -> str:
        return f"{type(self).__name__}({self.model_name})"
