"""Build the configured LLM client."""

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.openai_client import OpenAIClient
from app.core.config import LLMSettings, settings
from app.core.errors import InvalidConfigurationError


def create_llm_client(llm_settings: LLMSettings | None = None) -> AbstractLLMClient:
    """Instantiate the client for ``LLM_PROVIDER``.

    Raises:
        InvalidConfigurationError: If the provider is unknown or its
            credentials are missing.
    """
    cfg = llm_settings or settings.llm
    provider = cfg.provider.lower()

    if provider == "openai":
        if not cfg.api_key:
            raise InvalidConfigurationError(
                code="llm_missing_api_key",
                message="OpenAI provider requires LLM_API_KEY environment variable",
                details={"provider": provider},
            )
        return OpenAIClient(
            api_key=cfg.api_key,
            model=cfg.model,
            base_url=cfg.base_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise InvalidConfigurationError(
        code="llm_unknown_provider",
        message=f"Unknown LLM provider: '{provider}'. Supported providers: openai",
        details={"provider": provider},
    )
