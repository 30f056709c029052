"""LiteLLM-backed provider for OpenRouter, OpenAI and local OpenAI-compatible servers."""
from __future__ import annotations

import json
import logging
import os
from typing import Any

from aether_crawl.config import LLMSettings
from aether_crawl.llm.output_parser import OutputParser
from aether_crawl.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_KEY_ENV_VARS = {
    "openrouter": "OPENROUTER_API_KEY",
    "openai": "OPENAI_API_KEY",
}


class LiteLLMProvider(LLMProvider):
    def __init__(self, settings: LLMSettings | None = None):
        self.settings = settings or LLMSettings()
        self._model = self.settings.model
        provider = self.settings.provider.lower()
        if provider == "openrouter":
            self._litellm_model = f"openrouter/{self._model}"
            self._api_base: str | None = None
        elif provider == "openai":
            self._litellm_model = self._model
            self._api_base = None
        elif provider == "local":
            # LM Studio and Ollama both expose an OpenAI-compatible /v1 API.
            self._litellm_model = f"openai/{self._model}"
            self._api_base = self.settings.base_url
        else:
            raise ValueError(f"Unknown LLM provider: {self.settings.provider}")
        self._provider = provider

    @property
    def api_key(self) -> str | None:
        if self.settings.api_key:
            return self.settings.api_key
        if self._provider == "local":
            return "not-needed"
        return os.environ.get(_KEY_ENV_VARS[self._provider])

    def generate(self, prompt: str, system_prompt: str | None = None,
                 temperature: float = 0.8, max_tokens: int = 1024) -> str:
        try:
            import litellm
            messages: list[dict[str, str]] = []
            if system_prompt:
                messages.append({"role": "system", "content": system_prompt})
            messages.append({"role": "user", "content": prompt})

            response = litellm.completion(
                model=self._litellm_model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                api_base=self._api_base,
                api_key=self.api_key,
                timeout=self.settings.timeout_seconds,
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"LLM generation failed ({self._litellm_model}): {e}")
            return ""

    def generate_structured(self, prompt: str, system_prompt: str | None = None,
                            temperature: float = 0.7, max_tokens: int = 512) -> dict[str, Any]:
        json_system = (system_prompt or "") + "\n\nYou MUST respond with valid JSON only. No other text."
        text = self.generate(prompt, json_system, temperature, max_tokens)
        if not text:
            return {}
        parsed = OutputParser.extract_json_from_text(text)
        if parsed is None:
            logger.warning(f"Failed to parse JSON from LLM: {text[:100]}...")
            return {}
        return parsed

    def is_available(self) -> bool:
        if self._provider != "local":
            return bool(self.api_key)
        try:
            import urllib.request
            req = urllib.request.Request(f"{self._api_base.rstrip('/')}/models")
            with urllib.request.urlopen(req, timeout=5) as resp:
                data = json.loads(resp.read())
                models = [m.get("id", "") for m in data.get("data", [])]
                return not models or self._model in models
        except Exception:
            return False

    @property
    def model_name(self) -> str:
        return self._model
