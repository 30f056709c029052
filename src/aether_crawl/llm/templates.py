"""Jinja2 prompt templates shipped in ``llm/prompts``."""
from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_PROMPTS_DIR = Path(__file__).parent / "prompts"
_jinja_env: Environment | None = None


def _get_jinja() -> Environment:
    global _jinja_env
    if _jinja_env is None:
        _jinja_env = Environment(
            loader=FileSystemLoader(str(_PROMPTS_DIR)),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
        )
    return _jinja_env


def render(template_name: str, **context: Any) -> str:
    return _get_jinja().get_template(template_name).render(**context)
