from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from openai import OpenAI

from hirescout.config import Settings
from hirescout.types import ModelResponse

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProviderConfig:
    name: str
    base_url: str
    api_key: str
    model: str
    timeout_sec: int
    use_responses_api: bool = True

    @property
    def configured(self) -> bool:
        return bool(self.api_key)


class LLMProvider:
    def __init__(self, config: ProviderConfig):
        self.config = config
        self.client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key or "unset",
            timeout=float(config.timeout_sec),
        )

    def complete_text(self, *, prompt: str, model: str | None = None) -> ModelResponse:
        model = model or self.config.model
        if not self.config.use_responses_api:
            return self._complete_via_chat_completions(model=model, prompt=prompt)

        try:
            return self._complete_via_responses(model=model, prompt=prompt)
        except Exception as exc:
            if not self._is_unsupported_responses_endpoint(exc):
                raise

            logger.warning(
                "Responses API unavailable for provider=%s base_url=%s; "
                "falling back to chat.completions (%s)",
                self.config.name,
                self.config.base_url,
                exc,
            )
            return self._complete_via_chat_completions(model=model, prompt=prompt)

    def complete_json(self, *, prompt: str, model: str | None = None) -> dict[str, Any]:
        text_response = self.complete_text(prompt=prompt, model=model)
        return parse_json(text_response.content)

    def _complete_via_responses(self, *, model: str, prompt: str) -> ModelResponse:
        response = self.client.responses.create(
            model=model,
            input=[
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
        )
        text = getattr(response, "output_text", "") or ""
        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["api_path"] = "responses"
        return ModelResponse(content=text, raw=raw)

    def _complete_via_chat_completions(self, *, model: str, prompt: str) -> ModelResponse:
        response = self.client.chat.completions.create(
            model=model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.3,
        )

        text = self._extract_chat_text(response)
        raw = response.model_dump() if hasattr(response, "model_dump") else {}
        if not isinstance(raw, dict):
            raw = {"raw": raw}
        raw["api_path"] = "chat_completions"
        return ModelResponse(content=text, raw=raw)

    @staticmethod
    def _extract_chat_text(response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        if not choices:
            return ""

        message = getattr(choices[0], "message", None)
        if message is None:
            return ""

        content = getattr(message, "content", "")
        if isinstance(content, str):
            return content
        if content is None:
            return ""
        return str(content)

    @staticmethod
    def _is_unsupported_responses_endpoint(exc: Exception) -> bool:
        status_code = getattr(exc, "status_code", None)
        if status_code == 404:
            return True

        message = str(exc).strip().lower()
        if not message:
            return False

        return "not found" in message or "404" in message


def strip_code_fences(content: str) -> str:
    candidate = content.strip()
    if "```" not in candidate:
        return candidate

    for part in candidate.split("```"):
        part = part.strip()
        if part.startswith("json"):
            part = part[4:].strip()
        if part.startswith("{") and part.endswith("}"):
            return part
    return candidate.replace("```json", "").replace("```", "").strip()


def parse_json(content: str) -> dict[str, Any]:
    candidate = strip_code_fences(content)
    if not candidate:
        return {}

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError:
        start, end = candidate.find("{"), candidate.rfind("}")
        if start == -1 or end <= start:
            logger.warning("Failed to parse JSON model output")
            return {}
        try:
            value = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError:
            logger.warning("Failed to parse JSON model output")
            return {}
    return value if isinstance(value, dict) else {}


class ProviderPool:
    def __init__(self, settings: Settings):
        self.settings = settings
        self._gemini: LLMProvider | None = None
        self._openai: LLMProvider | None = None

    def gemini(self) -> LLMProvider:
        if self._gemini is None:
            self._gemini = LLMProvider(
                ProviderConfig(
                    name="gemini",
                    base_url=self.settings.gemini_base_url,
                    api_key=self.settings.gemini_api_key,
                    model=self.settings.gemini_model,
                    timeout_sec=self.settings.gemini_timeout_sec,
                    use_responses_api=False,
                )
            )
        return self._gemini

    def openai(self) -> LLMProvider:
        if self._openai is None:
            self._openai = LLMProvider(
                ProviderConfig(
                    name="openai",
                    base_url=self.settings.openai_base_url,
                    api_key=self.settings.openai_api_key,
                    model=self.settings.openai_model,
                    timeout_sec=self.settings.openai_timeout_sec,
                )
            )
        return self._openai

    def ordered(self) -> list[LLMProvider]:
        """Providers in fallback order: configured primary first."""
        if self.settings.llm_primary_provider == "openai":
            return [self.openai(), self.gemini()]
        return [self.gemini(), self.openai()]
