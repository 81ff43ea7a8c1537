import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from openai import AsyncOpenAI, OpenAIError

logger = logging.getLogger(__name__)

DEEPSEEK_BASE_URL = "https://api.deepseek.com"
DEFAULT_MODEL = "gpt-4o"


class ProviderConfigError(RuntimeError):
    """Raised when a provider is used without its API key."""


@dataclass(frozen=True)
class ModelConfig:
    provider: str  # "openai" | "deepseek"
    api_model: str
    supports_image_input: bool
    supports_temperature: bool = True


MODEL_CONFIG: dict[str, ModelConfig] = {
    "gpt-4o": ModelConfig("openai", "gpt-4o", supports_image_input=True),
    "gpt-4o-mini": ModelConfig("openai", "gpt-4o-mini", supports_image_input=True),
    "o3-mini": ModelConfig(
        "openai", "o3-mini", supports_image_input=False, supports_temperature=False
    ),
    # DeepSeek's API name for R1
    "deepseek-r1": ModelConfig(
        "deepseek", "deepseek-reasoner", supports_image_input=False, supports_temperature=False
    ),
}

AI_MODEL_LIST = list(MODEL_CONFIG)


def is_ai_model(value: object) -> bool:
    return isinstance(value, str) and value in MODEL_CONFIG


def resolve_default_model(configured: Optional[str]) -> str:
    configured = (configured or "").strip()
    if is_ai_model(configured):
        return configured
    if configured:
        logger.warning(f"Unknown AI model '{configured}', falling back to {DEFAULT_MODEL}")
    return DEFAULT_MODEL


class OpenAIProvider:
    """Chat-completion client for OpenAI and DeepSeek (OpenAI-compatible API)."""

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        deepseek_api_key: Optional[str] = None,
        default_model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
        temperature: float = 0.2,
    ):
        """Initialize provider.

        Args:
            openai_api_key: OpenAI key (OPENAI_API_KEY).
            deepseek_api_key: DeepSeek key (DEEPSEEK_API_KEY).
            default_model: Model key used when a call names none.
            max_tokens: Max response tokens.
            temperature: Sampling temperature (ignored by reasoning models).
        """
        self._keys = {"openai": openai_api_key, "deepseek": deepseek_api_key}
        self._default_model = resolve_default_model(default_model)
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._clients: dict[str, AsyncOpenAI] = {}

    @property
    def default_model(self) -> str:
        return self._default_model

    def supports_image_input(self, model: Optional[str] = None) -> bool:
        return MODEL_CONFIG[self._resolve(model)].supports_image_input

    def _resolve(self, model: Optional[str]) -> str:
        return model if is_ai_model(model) else self._default_model

    def _client_for(self, config: ModelConfig) -> AsyncOpenAI:
        if config.provider in self._clients:
            return self._clients[config.provider]

        key = self._keys.get(config.provider)
        if not key:
            env_var = f"{config.provider.upper()}_API_KEY"
            raise ProviderConfigError(f"{env_var} is not configured in .env")

        if config.provider == "deepseek":
            client = AsyncOpenAI(api_key=key, base_url=DEEPSEEK_BASE_URL)
        else:
            client = AsyncOpenAI(api_key=key)

        self._clients[config.provider] = client
        return client

    def _request_kwargs(self, config: ModelConfig, messages: list[dict[str, Any]]) -> dict:
        kwargs: dict[str, Any] = {"model": config.api_model, "messages": messages}
        if config.supports_temperature:
            kwargs["temperature"] = self._temperature
            kwargs["max_tokens"] = self._max_tokens
        else:
            kwargs["max_completion_tokens"] = self._max_tokens
        return kwargs

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
    ) -> str:
        model_key = self._resolve(model)
        config = MODEL_CONFIG[model_key]
        client = self._client_for(config)

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = await client.chat.completions.create(
                **self._request_kwargs(config, messages)
            )
        except OpenAIError as e:
            logger.error(f"[{model_key}] Completion failed: {e}")
            raise

        content = response.choices[0].message.content or ""
        logger.info(f"[{model_key}] Completion: {len(content)} chars")
        return content

    async def chat_stream(
        self,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        model_key = self._resolve(model)
        config = MODEL_CONFIG[model_key]
        client = self._client_for(config)

        try:
            response = await client.chat.completions.create(
                **self._request_kwargs(config, messages), stream=True
            )
            async for chunk in response:
                if chunk.choices and chunk.choices[0].delta.content:
                    yield chunk.choices[0].delta.content
        except OpenAIError as e:
            logger.error(f"[{model_key}] Stream error: {e}")
            raise
