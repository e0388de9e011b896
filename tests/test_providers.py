"""Tests for translation clients."""

from types import SimpleNamespace
from unittest import mock

import pytest

from pagewright.configuration import PagewrightConfig
from pagewright.errors import (
    TranslationProviderConfigurationError,
    TranslationProviderError,
)
from pagewright.providers import (
    LegacyOpenAITranslationClient,
    OpenAITranslationClient,
    build_client,
)


def openai_settings(**overrides):
    values = {"OPENAI_API_KEY": "sk-test"}
    values.update(overrides)
    return PagewrightConfig(**values)


class TestBuildClient:
    @pytest.mark.parametrize("name", ["echo", "noop", "mock"])
    def test_passthrough_names_are_rejected(self, name):
        with pytest.raises(TranslationProviderConfigurationError, match="Unknown"):
            build_client(name, target_language="French")

    def test_unknown_provider(self):
        with pytest.raises(TranslationProviderConfigurationError):
            build_client("babelfish", target_language="French")

    def test_missing_key_is_reported(self):
        with pytest.raises(TranslationProviderConfigurationError, match="OPENAI_API_KEY"):
            build_client("openai", target_language="French", settings=PagewrightConfig())

    def test_builds_openai_client(self):
        with mock.patch("openai.OpenAI") as factory:
            client = build_client(
                "openai", target_language="French", settings=openai_settings()
            )

        factory.assert_called_once_with(api_key="sk-test")
        assert isinstance(client, OpenAITranslationClient)

    def test_legacy_alias(self):
        with mock.patch("openai.OpenAI"):
            client = build_client(
                "legacy", target_language="French", settings=openai_settings()
            )

        assert isinstance(client, LegacyOpenAITranslationClient)

    def test_builds_azure_client(self):
        settings = PagewrightConfig(
            LLM_PROVIDER="azure_openai",
            AZURE_OPENAI_API_KEY="key",
            AZURE_OPENAI_ENDPOINT="https://example.invalid",
            AZURE_OPENAI_API_VERSION="2024-06-01",
            AZURE_OPENAI_DEPLOYMENT_NAME="translator",
        )
        with mock.patch("openai.AzureOpenAI") as factory:
            client = build_client("openai", target_language="French", settings=settings)

        factory.assert_called_once_with(
            api_key="key",
            api_version="2024-06-01",
            azure_endpoint="https://example.invalid",
        )
        assert client._default_model == "translator"


class TestOpenAITranslationClient:
    def setup_method(self):
        with mock.patch("openai.OpenAI") as factory:
            self.client = OpenAITranslationClient(
                target_language="German",
                source_language="English",
                settings=openai_settings(),
            )
        self.sdk = factory.return_value

    def test_sends_one_paragraph_and_cleans_reply(self):
        self.sdk.responses.create.return_value = SimpleNamespace(
            output_text='"Guten Morgen"'
        )

        assert self.client.translate("Good morning") == "Guten Morgen"
        kwargs = self.sdk.responses.create.call_args.kwargs
        assert kwargs["model"] == "gpt-5-mini"
        assert kwargs["input"][1]["content"][0]["text"] == "Good morning"
        assert "from English into German" in kwargs["input"][0]["content"][0]["text"]

    def test_blank_text_is_not_sent(self):
        assert self.client.translate("   ") == ""
        self.sdk.responses.create.assert_not_called()

    def test_reads_output_parts(self):
        part = SimpleNamespace(text="Hallo")
        self.sdk.responses.create.return_value = SimpleNamespace(
            output_text=None, output=[SimpleNamespace(content=[part])]
        )

        assert self.client.translate("Hello") == "Hallo"

    def test_strips_code_fence(self):
        self.sdk.responses.create.return_value = SimpleNamespace(
            output_text="```\nHallo Welt\n```"
        )

        assert self.client.translate("Hello world") == "Hallo Welt"

    def test_sdk_failure_becomes_provider_error(self):
        self.sdk.responses.create.side_effect = RuntimeError("timeout")

        with pytest.raises(TranslationProviderError):
            self.client.translate("Hello")


class TestLegacyClient:
    def test_reads_chat_completion(self):
        with mock.patch("openai.OpenAI") as factory:
            client = LegacyOpenAITranslationClient(
                target_language="Spanish", settings=openai_settings()
            )
        message = SimpleNamespace(content="Hola")
        factory.return_value.chat.completions.create.return_value = SimpleNamespace(
            choices=[SimpleNamespace(message=message)]
        )

        assert client.translate("Hello") == "Hola"
