"""Integration tests for LLM adapter layer."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APITimeoutError

from app.adapters.llm import OpenAIClient, create_llm_client
from app.core.config import LLMSettings
from app.core.errors import InvalidConfigurationError, LLMAppError, ValidationAppError


def _completion(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


class TestOpenAIClientIntegration:
    """OpenAI client with the chat-completions call mocked out."""

    @pytest.mark.asyncio
    async def test_generate_json_success(self) -> None:
        client = OpenAIClient(api_key="test-key-123", model="gpt-4o-mini")

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_completion('{"overall_assessment": "ok", "key_observations": ["x"]}'),
        ):
            result = await client.generate_json(prompt="Generate test JSON", temperature=0.1)

        assert result["overall_assessment"] == "ok"
        assert result["key_observations"] == ["x"]

    @pytest.mark.asyncio
    async def test_schema_enables_json_mode_and_passes_params(self) -> None:
        client = OpenAIClient(api_key="test-key", model="gpt-4o-mini")

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_completion('{"result": "ok"}'),
        ) as mock_create:
            await client.generate_json(prompt="Test", schema={"type": "object"}, max_tokens=200)

        call_kwargs = mock_create.call_args.kwargs
        assert call_kwargs["response_format"] == {"type": "json_object"}
        assert call_kwargs["max_tokens"] == 200
        assert call_kwargs["model"] == "gpt-4o-mini"
        assert call_kwargs["messages"][-1] == {"role": "user", "content": "Test"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("content", "code"),
        [
            ("This is not JSON", "llm_invalid_json"),
            ("[1, 2, 3]", "llm_invalid_json"),
            ("   ", "llm_empty_response"),
            (None, "llm_empty_response"),
        ],
    )
    async def test_bad_output_raises_llm_error(self, content: str | None, code: str) -> None:
        client = OpenAIClient(api_key="test-key", model="gpt-4o-mini")

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            return_value=_completion(content),
        ):
            with pytest.raises(LLMAppError) as exc_info:
                await client.generate_json(prompt="Test")

        assert exc_info.value.code == code

    @pytest.mark.asyncio
    async def test_timeout_maps_to_504(self) -> None:
        client = OpenAIClient(api_key="test-key", model="gpt-4o-mini")
        timeout = APITimeoutError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))

        with patch.object(
            client.client.chat.completions,
            "create",
            new_callable=AsyncMock,
            side_effect=timeout,
        ):
            with pytest.raises(LLMAppError) as exc_info:
                await client.generate_json(prompt="Test")

        assert exc_info.value.code == "llm_timeout"
        assert exc_info.value.details["http_status"] == 504
        assert exc_info.value.details["provider"] == "openai"


class TestLLMFactory:
    def test_create_llm_client_with_settings(self) -> None:
        cfg = LLMSettings(provider="openai", api_key="test-key", model="gpt-4o-mini", timeout_seconds=30.0)

        client = create_llm_client(cfg)

        assert isinstance(client, OpenAIClient)
        assert client.model == "gpt-4o-mini"

    def test_missing_api_key_raises_error(self) -> None:
        cfg = LLMSettings(provider="openai", api_key=None, model="gpt-4o-mini")

        with pytest.raises(InvalidConfigurationError, match="requires LLM_API_KEY") as exc:
            create_llm_client(cfg)
        assert exc.value.code == "llm_missing_api_key"
        assert not isinstance(exc.value, ValidationAppError)

    def test_unknown_provider_raises_error(self) -> None:
        cfg = LLMSettings(provider="unknown-provider", api_key="test-key", model="gpt-4o-mini")

        with pytest.raises(InvalidConfigurationError, match="Unknown LLM provider") as exc:
            create_llm_client(cfg)
        assert exc.value.code == "llm_unknown_provider"
