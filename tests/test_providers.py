"""Tests for translation engines and the engine factory."""
import asyncio
import json

import httpx
import pytest

from potr.errors import ConfigurationError, ProviderError
from potr.providers import (
    AzureOpenAITranslator,
    ClearTranslator,
    CloneTranslator,
    DeepLTranslator,
    OpenAICompatTranslator,
    build_translator,
)
from potr.providers.deepl import deepl_base_url, deepl_target
from potr.schemas import TranslatorSettings
from potr.utils import debug_buffer

CHINESE = "这是一段中文文本。"


def chat_response(content):
    return httpx.Response(200, json={"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]})


def recording_transport(response):
    seen = []

    def handler(request):
        seen.append(request)
        return response(request) if callable(response) else response

    return httpx.MockTransport(handler), seen


def translate(translator, text):
    return asyncio.run(translator.translate(text))


# === Local engines ===

def test_clear_translator_returns_empty_string():
    assert translate(ClearTranslator(TranslatorSettings(engine="clear")), CHINESE) == ""


def test_clone_translator_echoes_input():
    assert translate(CloneTranslator(TranslatorSettings(engine="clone")), CHINESE) == CHINESE


# === OpenAI ===

class TestOpenAI:
    def settings(self, **kwargs):
        base = dict(engine="openai", target_lang="en", api_key="sk-test")
        base.update(kwargs)
        return TranslatorSettings(**base)

    def test_request_shape(self):
        transport, seen = recording_transport(chat_response("This is a Chinese text."))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)

        assert translate(translator, CHINESE) == "This is a Chinese text."

        request = seen[0]
        assert str(request.url) == "https://api.openai.com/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["model"] == "gpt-3.5-turbo"
        assert body["messages"][0]["role"] == "system"
        assert "into English without explanation" in body["messages"][0]["content"]
        assert body["messages"][-1] == {"role": "user", "content": CHINESE}

    def test_custom_base_and_model(self):
        transport, seen = recording_transport(chat_response("Hej"))
        translator = OpenAICompatTranslator(
            self.settings(api_base="http://127.0.0.1:1234/v1/", model="gpt-4o-mini", target_lang="sv"),
            transport=transport,
        )

        translate(translator, "Hello")

        assert str(seen[0].url) == "http://127.0.0.1:1234/v1/chat/completions"
        body = json.loads(seen[0].content)
        assert body["model"] == "gpt-4o-mini"
        assert "Swedish" in body["messages"][0]["content"]

    def test_null_content_is_empty_translation(self):
        transport, _ = recording_transport(chat_response(None))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)
        assert translate(translator, "Hello") == ""

    def test_http_error_raises_provider_error(self):
        transport, _ = recording_transport(httpx.Response(429, text="rate limited"))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)
        with pytest.raises(ProviderError, match="429"):
            translate(translator, "Hello")

    def test_missing_choices_raises_provider_error(self):
        transport, _ = recording_transport(httpx.Response(200, json={"choices": []}))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)
        with pytest.raises(ProviderError, match="Unexpected provider schema"):
            translate(translator, "Hello")

    def test_non_json_body_raises_provider_error(self):
        transport, _ = recording_transport(httpx.Response(200, text="<html>oops</html>"))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)
        with pytest.raises(ProviderError, match="non-JSON"):
            translate(translator, "Hello")

    def test_connection_error_raises_provider_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        translator = OpenAICompatTranslator(self.settings(), transport=httpx.MockTransport(refuse))
        with pytest.raises(ProviderError, match="Cannot connect"):
            translate(translator, "Hello")

    def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError, match="POTR_API_KEY_OPENAI"):
            OpenAICompatTranslator(self.settings(api_key=""))

    def test_exchanges_are_recorded_without_secrets(self):
        transport, _ = recording_transport(chat_response("Hej"))
        translator = OpenAICompatTranslator(self.settings(), transport=transport)

        translate(translator, "Hello")

        snapshots = debug_buffer.recent(5)
        assert [s["dir"] for s in snapshots] == ["request", "response"]
        assert "sk-test" not in json.dumps(snapshots)


# === Azure OpenAI ===

class TestAzureOpenAI:
    def settings(self, **kwargs):
        base = dict(
            engine="azure-openai",
            target_lang="en",
            api_key="azure-key",
            api_base="https://res.openai.azure.com/",
            api_deployment_id="gpt35",
        )
        base.update(kwargs)
        return TranslatorSettings(**base)

    def test_request_shape(self):
        transport, seen = recording_transport(chat_response("Done"))
        translator = AzureOpenAITranslator(self.settings(), transport=transport)

        assert translate(translator, "Fertig") == "Done"

        request = seen[0]
        assert request.url.path == "/openai/deployments/gpt35/chat/completions"
        assert request.url.host == "res.openai.azure.com"
        assert request.url.params["api-version"] == "2023-05-15"
        assert request.headers["api-key"] == "azure-key"
        assert "Authorization" not in request.headers
        assert "model" not in json.loads(request.content)

    def test_explicit_api_version(self):
        transport, seen = recording_transport(chat_response("Done"))
        translator = AzureOpenAITranslator(self.settings(api_version="2024-02-01"), transport=transport)
        translate(translator, "Fertig")
        assert seen[0].url.params["api-version"] == "2024-02-01"

    @pytest.mark.parametrize(
        "missing, message",
        [("api_key", "POTR_API_KEY_AZURE_OPENAI"), ("api_base", "API base"), ("api_deployment_id", "deployment id")],
    )
    def test_required_options(self, missing, message):
        with pytest.raises(ConfigurationError, match=message):
            AzureOpenAITranslator(self.settings(**{missing: None if missing != "api_key" else ""}))


# === DeepL ===

class TestDeepL:
    def settings(self, **kwargs):
        base = dict(engine="deepl", target_lang="de", api_key="deepl-key")
        base.update(kwargs)
        return TranslatorSettings(**base)

    def test_request_shape(self):
        transport, seen = recording_transport(
            httpx.Response(200, json={"translations": [{"detected_source_language": "EN", "text": "Hallo"}]})
        )
        translator = DeepLTranslator(self.settings(), transport=transport)

        assert translate(translator, "Hello") == "Hallo"

        request = seen[0]
        assert str(request.url) == "https://api.deepl.com/v2/translate"
        assert request.headers["Authorization"] == "DeepL-Auth-Key deepl-key"
        assert json.loads(request.content) == {"text": ["Hello"], "target_lang": "DE"}

    def test_free_keys_use_free_host(self):
        assert deepl_base_url("abc:fx") == "https://api-free.deepl.com"
        assert deepl_base_url("abc") == "https://api.deepl.com"
        assert deepl_base_url("abc:fx", "http://localhost:8080/") == "http://localhost:8080"

    def test_language_mapping(self):
        assert deepl_target("zh") == "ZH"
        assert deepl_target("PT") == "PT"
        with pytest.raises(ConfigurationError, match="Unsupported language for DeepL"):
            deepl_target("ko")

    def test_quota_exceeded(self):
        transport, _ = recording_transport(httpx.Response(456, text="Quota exceeded"))
        translator = DeepLTranslator(self.settings(), transport=transport)
        with pytest.raises(ProviderError, match="quota"):
            translate(translator, "Hello")

    def test_malformed_response(self):
        transport, _ = recording_transport(httpx.Response(200, json={"translations": []}))
        translator = DeepLTranslator(self.settings(), transport=transport)
        with pytest.raises(ProviderError, match="Unexpected DeepL response"):
            translate(translator, "Hello")

    def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError, match="POTR_API_KEY_DEEPL"):
            DeepLTranslator(self.settings(api_key=""))


# === Factory ===

@pytest.mark.parametrize(
    "engine, cls",
    [
        ("clear", ClearTranslator),
        ("clone", CloneTranslator),
        ("openai", OpenAICompatTranslator),
        ("azure-openai", AzureOpenAITranslator),
        ("deepl", DeepLTranslator),
    ],
)
def test_build_translator_for_every_engine(engine, cls):
    settings = TranslatorSettings(
        engine=engine,
        target_lang="en",
        api_key="key",
        api_base="https://your-resource-name.openai.azure.com",
        api_deployment_id="mock-deployment",
    )
    translator = build_translator(settings)
    assert isinstance(translator, cls)
    assert translator.name == engine


def test_local_engines_need_no_credentials():
    assert build_translator(TranslatorSettings(engine="clone")).name == "clone"


def test_remote_engine_without_key_fails_at_build_time():
    with pytest.raises(ConfigurationError):
        build_translator(TranslatorSettings(engine="openai"))
