"""Translation provider abstractions."""

from __future__ import annotations

import json
import os
import sys
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
import openai
from openai import OpenAI

from .errors import (
    ProviderConfigurationError,
    ProviderHTTPError,
    TranslationProviderError,
    UnexpectedResponseFormatError,
)
from .languages import describe_language
from .structures import ProviderConfig

MAX_OUTPUT_TOKENS = 4000
TEMPERATURE = 0.1
HOSTED_TIMEOUT_SECONDS = 60.0
LOCAL_TIMEOUT_SECONDS = 120.0

TRANSLATION_PROMPT = (
    "You are a professional compliance document translator. Translate the "
    "following text from {source} to {target} exactly as written, preserving "
    "all formatting, markdown syntax, YAML frontmatter, and technical terms. "
    "Do not add any comments, explanations, or additional content. Return only "
    "the translated text.\n\n{text}"
)


def build_translation_prompt(text: str, source_language: str, target_language: str) -> str:
    """Embed both language names and the literal text in the instruction."""

    return TRANSLATION_PROMPT.format(
        source=describe_language(source_language),
        target=describe_language(target_language),
        text=text,
    )


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "provider"

    def __init__(self, *, model: str, debug: bool = False) -> None:
        self.model = model
        self.debug = debug

    @abstractmethod
    def translate(self, text: str, source_language: str, target_language: str) -> str:
        """Translate ``text`` and return the provider's answer."""

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[comply][provider-debug] {self.name} {label}:\n{message}", file=sys.stderr)


class OpenAIProvider(TranslationProvider):
    """Chat-completion provider backed by the OpenAI SDK."""

    name = "OpenAI"
    DEFAULT_MODEL = "gpt-4"
    timeout = HOSTED_TIMEOUT_SECONDS

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        http_client: httpx.Client | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(model=model or self.DEFAULT_MODEL, debug=debug)
        if not api_key:
            raise ProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        self._client = OpenAI(
            api_key=api_key,
            timeout=self.timeout,
            max_retries=0,
            http_client=http_client,
        )

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        prompt = build_translation_prompt(text, source_language, target_language)
        self._log_debug("request.prompt", prompt)
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
            )
        except openai.APIStatusError as exc:
            raise ProviderHTTPError(self.name, exc.status_code, exc.response.text) from exc
        except openai.APIResponseValidationError as exc:
            raise UnexpectedResponseFormatError(self.name, exc.response.text) from exc
        except openai.APIError as exc:
            raise TranslationProviderError(f"{self.name} API request failed: {exc}") from exc
        except ValueError as exc:
            # Body announced as JSON but could not be decoded.
            raise UnexpectedResponseFormatError(self.name, str(exc)) from exc

        self._log_debug("response.raw", self._safe_dump_response(completion))

        content: Optional[str] = None
        choices = getattr(completion, "choices", None) or []
        if choices:
            message = getattr(choices[0], "message", None)
            content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise UnexpectedResponseFormatError(
                self.name, json.dumps(self._safe_dump_response(completion), default=str)
            )
        return content.strip()

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK objects into JSON-friendly data."""

        if isinstance(response, str):
            return response
        for attr in ("model_dump_json", "model_dump"):
            candidate = getattr(response, attr, None)
            if candidate:
                try:
                    data = candidate()
                    if isinstance(data, str):
                        return json.loads(data)
                    return data
                except (TypeError, ValueError):
                    continue
        return str(response)


class HTTPTranslationProvider(TranslationProvider):
    """Provider speaking a JSON-over-HTTP protocol through httpx."""

    timeout = HOSTED_TIMEOUT_SECONDS

    def __init__(
        self,
        *,
        model: str,
        http_client: httpx.Client | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(model=model, debug=debug)
        self._http_client = http_client

    def _post(self, url: str, body: Dict[str, Any], headers: Dict[str, str]) -> Any:
        """POST ``body`` and return the decoded JSON of a successful response."""

        self._log_debug("request.body", body)
        if self._http_client is not None:
            return self._send(self._http_client, url, body, headers)
        with httpx.Client(timeout=httpx.Timeout(self.timeout)) as client:
            return self._send(client, url, body, headers)

    def _send(
        self,
        client: httpx.Client,
        url: str,
        body: Dict[str, Any],
        headers: Dict[str, str],
    ) -> Any:
        try:
            response = client.post(
                url,
                json=body,
                headers={"Content-Type": "application/json", **headers},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise TranslationProviderError(
                f"{self.name} API request timed out after {self.timeout:.0f} seconds"
            ) from exc
        except httpx.HTTPError as exc:
            raise TranslationProviderError(f"{self.name} API request failed: {exc}") from exc

        self._log_debug("response.raw", response.text)
        if not response.is_success:
            raise ProviderHTTPError(self.name, response.status_code, response.text)
        try:
            return response.json()
        except ValueError as exc:
            raise UnexpectedResponseFormatError(self.name, response.text) from exc


class AnthropicProvider(HTTPTranslationProvider):
    """Messages-API provider."""

    name = "Anthropic"
    DEFAULT_MODEL = "claude-3-5-sonnet-20241022"
    API_URL = "https://api.anthropic.com/v1/messages"
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        *,
        api_key: str | None,
        model: str | None = None,
        http_client: httpx.Client | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(model=model or self.DEFAULT_MODEL, http_client=http_client, debug=debug)
        if not api_key:
            raise ProviderConfigurationError(
                "Anthropic configuration missing. Set ANTHROPIC_API_KEY or choose "
                "a different provider."
            )
        self._api_key = api_key

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        body = {
            "model": self.model,
            "max_tokens": MAX_OUTPUT_TOKENS,
            "messages": [
                {
                    "role": "user",
                    "content": build_translation_prompt(text, source_language, target_language),
                }
            ],
        }
        headers = {"x-api-key": self._api_key, "anthropic-version": self.API_VERSION}
        result = self._post(self.API_URL, body, headers)

        content = result.get("content") if isinstance(result, dict) else None
        if isinstance(content, list) and content and isinstance(content[0], dict):
            text_value = content[0].get("text")
            if isinstance(text_value, str):
                return text_value.strip()
        raise UnexpectedResponseFormatError(self.name, json.dumps(result, default=str))


class OllamaProvider(HTTPTranslationProvider):
    """Local generation provider; slower, so it gets a longer timeout."""

    name = "Ollama"
    DEFAULT_MODEL = "llama3:8b"
    DEFAULT_BASE_URL = "http://localhost:11434"
    timeout = LOCAL_TIMEOUT_SECONDS

    def __init__(
        self,
        *,
        base_url: str | None = None,
        model: str | None = None,
        http_client: httpx.Client | None = None,
        debug: bool = False,
    ) -> None:
        super().__init__(
            model=model or os.getenv("OLLAMA_MODEL") or self.DEFAULT_MODEL,
            http_client=http_client,
            debug=debug,
        )
        self.base_url = (base_url or os.getenv("OLLAMA_URL") or self.DEFAULT_BASE_URL).rstrip("/")

    def translate(self, text: str, source_language: str, target_language: str) -> str:
        body = {
            "model": self.model,
            "prompt": build_translation_prompt(text, source_language, target_language),
            "stream": False,
        }
        result = self._post(f"{self.base_url}/api/generate", body, {})

        response_text = result.get("response") if isinstance(result, dict) else None
        if not isinstance(response_text, str):
            raise UnexpectedResponseFormatError(self.name, json.dumps(result, default=str))
        return response_text.strip()


PROVIDER_KINDS = ("openai", "anthropic", "ollama")


def build_provider(
    config: ProviderConfig,
    *,
    http_client: httpx.Client | None = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by kind (case-insensitive)."""

    normalized = (config.kind or "").strip().lower()
    if normalized == "openai":
        return OpenAIProvider(
            api_key=config.api_key, model=config.model, http_client=http_client, debug=debug
        )
    if normalized == "anthropic":
        return AnthropicProvider(
            api_key=config.api_key, model=config.model, http_client=http_client, debug=debug
        )
    if normalized == "ollama":
        return OllamaProvider(
            base_url=config.base_url, model=config.model, http_client=http_client, debug=debug
        )
    raise ProviderConfigurationError(
        f"Unknown translation provider '{config.kind}'. "
        f"Choose one of: {', '.join(PROVIDER_KINDS)}."
    )
