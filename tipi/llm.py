"""
llm.py
------
Google Gemini client used for skeleton generation and chat replies.

Model tiers (config.LLM_MODEL_TIERS) are tried in order: when a call to the
primary model raises or comes back empty, the next model is tried. LLMError is
raised once every tier has failed.
"""

from __future__ import annotations

import logging
from typing import Optional

from google import genai
from google.genai import types as genai_types

from tipi import config

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """The language-model provider could not produce a response."""


class LLMClient:
    """Thin wrapper over ``google.genai`` with ordered model-tier fallback."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        models: Optional[list[str]] = None,
        timeout_s: Optional[int] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self._models = list(models or config.LLM_MODEL_TIERS)
        self._timeout_s = timeout_s or config.LLM_TIMEOUT_S
        self._client: Optional[genai.Client] = None

    @property
    def models(self) -> list[str]:
        return list(self._models)

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise LLMError("GEMINI_API_KEY missing")
            self._client = genai.Client(
                api_key=self._api_key,
                http_options={"timeout": self._timeout_s * 1000},
            )
        return self._client

    def complete(
        self,
        prompt: str,
        *,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        """Return the model's text for ``prompt``, trying each model tier."""
        client = self._get_client()
        gen_config = genai_types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )

        last_error: Optional[Exception] = None
        for model in self._models:
            try:
                response = client.models.generate_content(
                    model=model,
                    contents=prompt,
                    config=gen_config,
                )
            except Exception as exc:
                logger.warning("Gemini call failed (model=%s): %s", model, exc)
                last_error = exc
                continue

            text = (getattr(response, "text", None) or "").strip()
            if text:
                return text
            logger.warning("Gemini returned an empty response (model=%s)", model)
            last_error = LLMError(f"Empty Gemini response from {model}")

        raise LLMError(f"All model tiers failed: {last_error}") from last_error
