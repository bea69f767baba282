"""Translation provider abstractions."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from .errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)
from .planner import BatchSchema

if TYPE_CHECKING:
    from .configuration import LinguciSettings

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTION = (
    "Translate the following keys word by word to {language}. "
    "Keep the original format and only translate the text values. "
    "Preserve placeholders, markup, and escape sequences exactly as written. "
    "Do not add any formatting or explanations."
)


@dataclass(frozen=True)
class PromptContext:
    """Everything besides the schema that a provider needs to build its prompt."""

    language: str
    locale: Optional[str] = None
    instruction: str = DEFAULT_INSTRUCTION

    def render(self) -> str:
        return self.instruction.format(language=self.language)


class ProviderKind(str, Enum):
    """Closed set of supported provider variants."""

    OPENAI = "openai"
    AZURE_OPENAI = "azure_openai"
    ECHO = "echo"

    @classmethod
    def parse(cls, name: str | None) -> "ProviderKind":
        normalized = (name or cls.OPENAI.value).strip().lower().replace("-", "_")
        synonyms = {
            "gpt": cls.OPENAI.value,
            "default": cls.OPENAI.value,
            "azure": cls.AZURE_OPENAI.value,
            "azure_open_ai": cls.AZURE_OPENAI.value,
            "azureopenai": cls.AZURE_OPENAI.value,
            "noop": cls.ECHO.value,
            "mock": cls.ECHO.value,
        }
        normalized = synonyms.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError as exc:
            supported = ", ".join(kind.value for kind in cls)
            raise TranslationProviderConfigurationError(
                f"Unknown translation provider '{name}'. Supported providers: {supported}."
            ) from exc


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name: str = "provider"

    @abstractmethod
    async def translate_batch(
        self,
        schema: BatchSchema,
        prompt: PromptContext,
    ) -> Dict[str, str]:
        """Translate every key in ``schema`` and return a mapping by key."""


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"

    async def translate_batch(
        self,
        schema: BatchSchema,
        prompt: PromptContext,
    ) -> Dict[str, str]:
        return {key: key for key in schema.keys}


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses OpenAI chat models with structured output."""

    name = "openai"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        *,
        settings: "LinguciSettings",
        model: str | None = None,
        debug: bool = False,
    ) -> None:
        self.settings = settings
        self.debug = debug
        self._client, default_model = self._build_client()
        self.model = model or default_model

    def _build_client(self) -> tuple[Any, str]:
        api_key = self.settings.OPENAI_API_KEY
        if not api_key:
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        from openai import AsyncOpenAI

        return AsyncOpenAI(api_key=api_key), self.DEFAULT_MODEL

    async def translate_batch(
        self,
        schema: BatchSchema,
        prompt: PromptContext,
    ) -> Dict[str, str]:
        if not schema.keys:
            return {}

        system_prompt = (
            "You are a professional software localizer. Return only JSON. "
            "Each property name of the requested object is a source message; "
            "its value must be that message translated into the requested language."
        )
        user_prompt = {
            "instruction": prompt.render(),
            "target_language": prompt.language,
            "target_locale": prompt.locale,
            "keys": list(schema.keys),
        }
        self._log_debug("provider.request.system_prompt", system_prompt)
        self._log_debug("provider.request.payload", user_prompt)

        content = await self._invoke_model(
            system_prompt=system_prompt,
            user_payload=user_prompt,
            schema=schema,
        )
        self._log_debug("provider.response.content", content)

        try:
            payload = json.loads(self._strip_code_fence(content))
        except json.JSONDecodeError as exc:
            raise TranslationProviderError(
                f"Translation provider returned invalid JSON: {exc}"
            ) from exc

        mapping = schema.validate(payload)
        self._log_debug("provider.response.mapping", mapping)
        return mapping

    async def _invoke_model(
        self,
        *,
        system_prompt: str,
        user_payload: dict,
        schema: BatchSchema,
    ) -> str:
        """Call the Chat Completions API and return the raw message content."""

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                temperature=0,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": json.dumps(user_payload, ensure_ascii=False),
                    },
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "translation_batch",
                        "schema": schema.json_schema(),
                        "strict": True,
                    },
                },
            )
        except Exception as exc:  # pragma: no cover - network call
            raise TranslationProviderError(
                f"Translation service temporarily unavailable: {exc}"
            ) from exc
        self._log_debug("provider.response.raw", self._safe_dump_response(response))
        return self._extract_content(response)

    def _extract_content(self, response: Any) -> str:
        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            if message is None:
                continue
            refusal = getattr(message, "refusal", None)
            if refusal:
                raise TranslationProviderError(
                    f"Translation provider refused the request: {refusal}"
                )
            message_content = getattr(message, "content", None)
            if isinstance(message_content, list):
                parts = [
                    str(part.get("text") if isinstance(part, dict) else getattr(part, "text", ""))
                    for part in message_content
                ]
                joined = "\n".join(part for part in parts if part)
                if joined:
                    return joined
            elif message_content:
                return str(message_content)

        raise TranslationProviderError(
            "Translation provider response empty or unrecognised."
        )

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
        logger.info("[provider-debug] %s:\n%s", label, message)

    def _safe_dump_response(self, response: Any) -> Any:
        """Best-effort conversion of SDK response objects into JSON-friendly data."""

        dump = getattr(response, "model_dump", None)
        if dump is not None:
            try:
                return dump()
            except (TypeError, ValueError):
                pass
        return str(response)

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        # Drop opening fence and optional language hint.
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()


class AzureOpenAITranslationProvider(OpenAITranslationProvider):
    """Same protocol as the OpenAI provider, routed through an Azure deployment."""

    name = "azure_openai"

    def _build_client(self) -> tuple[Any, str]:
        settings = self.settings
        missing = [
            name
            for name, value in {
                "AZURE_OPENAI_API_KEY": settings.AZURE_OPENAI_API_KEY,
                "AZURE_OPENAI_ENDPOINT": settings.AZURE_OPENAI_ENDPOINT,
                "AZURE_OPENAI_API_VERSION": settings.AZURE_OPENAI_API_VERSION,
                "AZURE_OPENAI_DEPLOYMENT_NAME": settings.AZURE_OPENAI_DEPLOYMENT_NAME,
            }.items()
            if not value
        ]
        if missing:
            raise TranslationProviderConfigurationError(
                "Azure OpenAI configuration incomplete. Please set: "
                + ", ".join(missing)
                + "."
            )

        from openai import AsyncAzureOpenAI

        client = AsyncAzureOpenAI(
            api_key=settings.AZURE_OPENAI_API_KEY,
            api_version=settings.AZURE_OPENAI_API_VERSION,
            azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
        )
        return client, settings.AZURE_OPENAI_DEPLOYMENT_NAME  # type: ignore[return-value]


def build_provider(
    kind: ProviderKind | str | None,
    *,
    settings: "LinguciSettings",
    model: str | None = None,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by kind."""

    if not isinstance(kind, ProviderKind):
        kind = ProviderKind.parse(kind)
    if kind is ProviderKind.OPENAI:
        return OpenAITranslationProvider(settings=settings, model=model, debug=debug)
    if kind is ProviderKind.AZURE_OPENAI:
        return AzureOpenAITranslationProvider(settings=settings, model=model, debug=debug)
    return EchoTranslationProvider()
