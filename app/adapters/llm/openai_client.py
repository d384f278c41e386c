"""OpenAI LLM client adapter."""

import json
import logging
from typing import Any

from openai import APITimeoutError, AsyncOpenAI, OpenAIError

from app.adapters.llm.base import AbstractLLMClient
from app.core.errors import LLMAppError

logger = logging.getLogger(__name__)

_PASSTHROUGH_PARAMS = ("max_tokens", "top_p", "seed")


class OpenAIClient(AbstractLLMClient):
    """Chat-completions client returning parsed JSON objects."""

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 15.0,
    ) -> None:
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {
                    "role": "system",
                    "content": "Output JSON only. No extra text or markdown formatting.",
                },
                {"role": "user", "content": prompt},
            ],
            "temperature": kwargs.pop("temperature", 0.4),
        }
        if schema is not None:
            request_params["response_format"] = {"type": "json_object"}
        for param in _PASSTHROUGH_PARAMS:
            if param in kwargs:
                request_params[param] = kwargs[param]

        try:
            response = await self.client.chat.completions.create(**request_params)
        except APITimeoutError as exc:
            raise LLMAppError(
                code="llm_timeout",
                message="The AI service took too long to respond",
                details=self._error_details(http_status=504),
            ) from exc
        except OpenAIError as exc:
            logger.warning(
                "llm.request_failed",
                extra={"provider": self.provider, "error_type": type(exc).__name__},
            )
            raise LLMAppError(
                code="llm_provider_error",
                message="The AI service returned an error",
                details=self._error_details(),
            ) from exc

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise LLMAppError(
                code="llm_empty_response",
                message="The AI service returned an empty response",
                details=self._error_details(),
            )

        try:
            parsed = json.loads(content.strip())
        except json.JSONDecodeError as exc:
            raise LLMAppError(
                code="llm_invalid_json",
                message="The AI service returned malformed output",
                details=self._error_details(),
            ) from exc

        if not isinstance(parsed, dict):
            raise LLMAppError(
                code="llm_invalid_json",
                message="The AI service returned malformed output",
                details=self._error_details(),
            )
        return parsed
