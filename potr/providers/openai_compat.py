from __future__ import annotations
from typing import Any, Dict, List, Optional

import httpx

from ..errors import ConfigurationError, ProviderError
from ..schemas import TranslatorSettings
from ..utils.debug_buffer import record as dbg_record
from ..utils.languages import language_name

DEFAULT_BASE_URL = "https://api.openai.com/v1"
# Cheapest chat model that handles short UI strings well
DEFAULT_MODEL = "gpt-3.5-turbo"
DEFAULT_AZURE_API_VERSION = "2023-05-15"


def build_messages(text: str, target_lang: str) -> List[Dict[str, str]]:
    return [
        {
            "role": "system",
            "content": (
                "You are a professional translator. Please translate the text into "
                f"{language_name(target_lang)} without explanation."
            ),
        },
        {"role": "assistant", "content": "I understand. Please give me the text."},
        {"role": "user", "content": text},
    ]


def extract_content(data: Any) -> str:
    """
    Pull choices[0].message.content out of a chat completion body.
    A null content is a valid (empty) answer; a missing choice is not.
    """
    try:
        message = data["choices"][0]["message"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"Unexpected provider schema. Body snippet: {str(data)[:300]}") from e
    content = message.get("content") if isinstance(message, dict) else None
    if content is None:
        return ""
    if not isinstance(content, str):
        raise ProviderError(f"Provider content is not a string: {str(content)[:200]}")
    return content


class OpenAICompatTranslator:
    """
    Chat-completions translator for OpenAI and OpenAI-compatible servers.

    One request per message; the completion text is the translation.
    """

    name = "openai"

    def __init__(
        self,
        settings: TranslatorSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.api_key:
            raise ConfigurationError(
                'OpenAI API key is not specified, please specify it via "-k" option '
                "or POTR_API_KEY_OPENAI environment variable."
            )
        self.target_lang = settings.target_lang
        self.model = settings.model or DEFAULT_MODEL
        self.url = f"{(settings.api_base or DEFAULT_BASE_URL).rstrip('/')}/chat/completions"
        self.params: Dict[str, str] = {}
        self.headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {settings.api_key}",
        }
        self.transport = transport
        self.timeout = httpx.Timeout(
            timeout=None,
            connect=30.0,
            read=float(settings.timeout_seconds),
            write=60.0,
            pool=60.0,
        )

    def build_body(self, text: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": build_messages(text, self.target_lang),
            "stream": False,
        }

    async def translate(self, text: str) -> str:
        body = self.build_body(text)
        dbg_record({"provider": self.name, "dir": "request", "chars": len(text), "snippet": text[:120]})

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                r = await client.post(self.url, headers=self.headers, params=self.params or None, json=body)
            except httpx.TimeoutException as e:
                raise ProviderError(f"Timeout contacting provider: {e}") from e
            except httpx.ConnectError as e:
                raise ProviderError(f"Cannot connect to provider: {e}") from e
            except httpx.HTTPError as e:
                raise ProviderError(f"HTTP error contacting provider: {e}") from e

        if r.status_code >= 400:
            dbg_record({"provider": self.name, "dir": "error", "status": r.status_code, "snippet": r.text[:200]})
            raise ProviderError(f"Provider HTTP {r.status_code}: {r.text[:500]}")

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError(f"Provider returned non-JSON body: {r.text[:200]}") from e

        content = extract_content(data)
        dbg_record({"provider": self.name, "dir": "response", "snippet": content[:200]})
        return content


class AzureOpenAITranslator(OpenAICompatTranslator):
    """Same chat payload, routed to an Azure deployment with an api-key header."""

    name = "azure-openai"

    def __init__(
        self,
        settings: TranslatorSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not settings.api_key:
            raise ConfigurationError(
                'Azure OpenAI service API key is not specified, please specify it via "-k" option '
                "or POTR_API_KEY_AZURE_OPENAI environment variable."
            )
        if not settings.api_base:
            raise ConfigurationError(
                "Azure OpenAI API base is not specified, please specify it via --api-base "
                "or POTR_API_BASE_AZURE_OPENAI environment variable."
            )
        if not settings.api_deployment_id:
            raise ConfigurationError(
                "Azure OpenAI deployment id is not specified, please specify it via --api-deployment-id "
                "or POTR_API_DEPLOYMENT_ID_AZURE_OPENAI environment variable."
            )
        super().__init__(settings, transport=transport)
        base = settings.api_base.rstrip("/")
        self.url = f"{base}/openai/deployments/{settings.api_deployment_id}/chat/completions"
        self.params = {"api-version": settings.api_version or DEFAULT_AZURE_API_VERSION}
        self.headers = {"Content-Type": "application/json", "api-key": settings.api_key}

    def build_body(self, text: str) -> Dict[str, Any]:
        # The deployment pins the model
        return {"messages": build_messages(text, self.target_lang), "stream": False}
