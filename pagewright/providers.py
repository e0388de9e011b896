"""Translation client abstractions."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from .errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)

if TYPE_CHECKING:  # pragma: no cover
    from .configuration import PagewrightConfig

logger = logging.getLogger(__name__)

QUOTE_PAIRS = (('"', '"'), ("“", "”"), ("«", "»"), ("'", "'"))


class TranslationClient(ABC):
    """Translates one paragraph of plain text at a time."""

    name = "client"

    def __init__(
        self,
        *,
        target_language: str,
        source_language: str | None = None,
        model: str | None = None,
    ) -> None:
        self.target_language = target_language
        self.source_language = source_language
        self.model = model

    @abstractmethod
    def translate(self, text: str) -> str:
        """Return the translation of ``text``; ``""`` signals an empty reply."""


class OpenAITranslationClient(TranslationClient):
    """Translation client that uses OpenAI models through the Responses API."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"

    def __init__(
        self,
        *,
        target_language: str,
        source_language: str | None = None,
        model: str | None = None,
        settings: "PagewrightConfig | None" = None,
        debug: bool = False,
    ) -> None:
        super().__init__(
            target_language=target_language,
            source_language=source_language,
            model=model,
        )
        self.debug = debug
        self.settings = settings
        self.provider_kind = settings.LLM_PROVIDER if settings else "openai"
        self._client, self._default_model = self._build_client()

    def _build_client(self) -> tuple[Any, str]:
        if self.provider_kind == "azure_openai":
            return self._build_azure_client()

        return self._build_openai_client()

    def _build_openai_client(self) -> tuple[Any, str]:
        api_key = self.settings.OPENAI_API_KEY if self.settings else None
        if not api_key:
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        try:
            from openai import OpenAI
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        return OpenAI(api_key=api_key), self.DEFAULT_MODEL

    def _build_azure_client(self) -> tuple[Any, str]:
        settings = self.settings
        values = {
            "AZURE_OPENAI_API_KEY": settings.AZURE_OPENAI_API_KEY if settings else None,
            "AZURE_OPENAI_ENDPOINT": settings.AZURE_OPENAI_ENDPOINT if settings else None,
            "AZURE_OPENAI_API_VERSION": (
                settings.AZURE_OPENAI_API_VERSION if settings else None
            ),
            "AZURE_OPENAI_DEPLOYMENT_NAME": (
                settings.AZURE_OPENAI_DEPLOYMENT_NAME if settings else None
            ),
        }
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise TranslationProviderConfigurationError(
                "Azure OpenAI configuration incomplete. Please set: "
                + ", ".join(missing)
                + "."
            )

        try:
            from openai import AzureOpenAI
        except ImportError as exc:  # pragma: no cover - import guard
            raise TranslationProviderConfigurationError(
                "OpenAI Python SDK not installed. Install with `pip install openai`."
            ) from exc

        client = AzureOpenAI(
            api_key=values["AZURE_OPENAI_API_KEY"],
            api_version=values["AZURE_OPENAI_API_VERSION"],
            azure_endpoint=values["AZURE_OPENAI_ENDPOINT"],
        )
        return client, values["AZURE_OPENAI_DEPLOYMENT_NAME"]  # type: ignore[return-value]

    def system_prompt(self) -> str:
        source = (
            f"from {self.source_language} " if self.source_language else ""
        )
        return (
            "You are a professional translator. "
            f"Translate the user's text {source}into {self.target_language}. "
            "The text is a single paragraph of a typeset document. "
            "Return only the translated text as one paragraph, without line breaks, "
            "quotes, commentary, or markdown. Preserve numbers, placeholders, and "
            "punctuation style."
        )

    def translate(self, text: str) -> str:
        if not text.strip():
            return ""

        prompt = self.system_prompt()
        self._log_debug("provider.request.system_prompt", prompt)
        self._log_debug("provider.request.text", text)

        reply = self._invoke_model(
            system_prompt=prompt,
            text=text,
            model=self.model or self._default_model,
        )
        cleaned = self._clean_reply(reply)
        self._log_debug("provider.response.text", cleaned)
        return cleaned

    def _invoke_model(self, *, system_prompt: str, text: str, model: str) -> str:
        """Call the OpenAI Responses API and return the reply text."""

        try:
            response = self._client.responses.create(
                model=model,
                input=[
                    {
                        "role": "system",
                        "content": [
                            {"type": "input_text", "text": system_prompt},
                        ],
                    },
                    {
                        "role": "user",
                        "content": [{"type": "input_text", "text": text}],
                    },
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", self._safe_dump_response(response))
        return self._extract_text(response)

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
        logger.debug("%s:\n%s", label, message)

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK response objects into JSON-friendly data."""

        for attr in ("model_dump_json", "model_dump"):
            candidate = getattr(response, attr, None)
            if callable(candidate):
                try:
                    data = candidate()
                    if isinstance(data, str):
                        return json.loads(data)
                    return data
                except (TypeError, ValueError):
                    continue
        return str(response)

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped.strip("`").strip()
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()

    def _clean_reply(self, reply: str | None) -> str:
        """Normalise a model reply into a single paragraph of text."""

        if not reply:
            return ""
        text = self._strip_code_fence(str(reply))
        for opening, closing in QUOTE_PAIRS:
            if len(text) >= 2 and text.startswith(opening) and text.endswith(closing):
                text = text[len(opening) : -len(closing)].strip()
                break
        return text

    def _extract_text(self, response: Any) -> str:
        """Extract reply text from a Responses API result."""

        output_text = getattr(response, "output_text", None)
        if hasattr(output_text, "value"):
            output_text = output_text.value
        if output_text:
            return str(output_text)

        parts: list[str] = []
        for item in getattr(response, "output", None) or []:
            for part in getattr(item, "content", None) or []:
                text_value = getattr(part, "text", None)
                if hasattr(text_value, "value"):
                    text_value = text_value.value
                if text_value:
                    parts.append(str(text_value))
        return "".join(parts)


class LegacyOpenAITranslationClient(OpenAITranslationClient):
    """Translation client that uses the Chat Completions API for compatibility."""

    name = "legacy-openai"

    def _invoke_model(self, *, system_prompt: str, text: str, model: str) -> str:
        """Call the Chat Completions API and return the reply text."""

        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": text},
                ],
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", self._safe_dump_response(response))

        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            content = getattr(message, "content", None) if message is not None else None
            if isinstance(content, list):
                pieces = []
                for part in content:
                    value = getattr(part, "text", None)
                    if value is None and isinstance(part, dict):
                        value = part.get("text")
                    if value:
                        pieces.append(str(value))
                if pieces:
                    return "".join(pieces)
            elif content:
                return str(content)
        return ""


def build_client(
    name: str | None,
    *,
    target_language: str,
    source_language: str | None = None,
    model: str | None = None,
    settings: "PagewrightConfig | None" = None,
    debug: bool = False,
) -> TranslationClient:
    """Factory to create translation clients by name."""

    normalized = (name or "openai").strip().lower()
    if normalized in {"openai", "gpt", "default"}:
        client_cls: type[OpenAITranslationClient] = OpenAITranslationClient
    elif normalized in {"legacy-openai", "legacy_openai", "legacy", "openai-legacy"}:
        client_cls = LegacyOpenAITranslationClient
    else:
        raise TranslationProviderConfigurationError(
            f"Unknown translation provider '{name}'."
        )

    if settings is not None:
        from .configuration import validate_provider_settings

        validate_provider_settings(settings)

    return client_cls(
        target_language=target_language,
        source_language=source_language,
        model=model,
        settings=settings,
        debug=debug,
    )
