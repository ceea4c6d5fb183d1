import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as redis
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class PromptTemplates:
    """Per-operation prompt templates.

    Templates use ``{}`` positional placeholders. ``translate_on_context``
    takes two arguments (context, keyword); every other template takes one.
    """

    system: str = "You are a precise language assistant. Reply with the answer only."
    translate: str = "Translate the following text into Chinese: {}"
    translate_on_context: str = (
        "Given the context \"{}\", translate the word or phrase \"{}\" into Chinese "
        "as it is used in that context."
    )
    format: str = "Reformat the following text into clean, well punctuated prose: {}"
    summarize: str = "Summarize the following text in a few sentences: {}"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Generative backend (OpenAI-compatible chat completions)
    llm_api_key: str | None = os.getenv("LLM_API_KEY")
    llm_base_url: str = os.getenv("LLM_BASE_URL", "https://api.deepseek.com/v1")
    llm_model: str = os.getenv("LLM_MODEL", "deepseek-chat")
    llm_timeout: float = float(os.getenv("LLM_TIMEOUT", "30"))

    # Prompts
    prompt_system: str = os.getenv("PROMPT_SYSTEM", PromptTemplates.system)
    prompt_translate: str = os.getenv("PROMPT_TRANSLATE", PromptTemplates.translate)
    prompt_translate_on_context: str = os.getenv(
        "PROMPT_TRANSLATE_ON_CONTEXT", PromptTemplates.translate_on_context
    )
    prompt_format: str = os.getenv("PROMPT_FORMAT", PromptTemplates.format)
    prompt_summarize: str = os.getenv("PROMPT_SUMMARIZE", PromptTemplates.summarize)

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "textcache")
    storage_timeout: float = float(os.getenv("STORAGE_TIMEOUT", "5"))

    # Rate limiting
    rate_limit_enabled: bool = _env_bool("RATE_LIMIT_ENABLED", "true")
    rate_limit_rate: float = float(os.getenv("RATE_LIMIT_RATE", "10"))
    rate_limit_burst: int = int(os.getenv("RATE_LIMIT_BURST", "10"))
    rate_limit_ttl: float = float(os.getenv("RATE_LIMIT_TTL", "86400"))  # 24 hours
    # Header name is used as configured, e.g. X-Real-IP. Only set this behind a
    # reverse proxy that overwrites the header.
    rate_limit_identity_header: str = os.getenv("RATE_LIMIT_IDENTITY_HEADER", "")

    # Request guards
    max_param_length: int = int(os.getenv("MAX_PARAM_LENGTH", "1024"))
    max_url_length: int = int(os.getenv("MAX_URL_LENGTH", "4096"))

    # Listeners
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8085"))
    metrics_port: int = int(os.getenv("METRICS_PORT", "8086"))
    shutdown_grace_period: float = float(os.getenv("SHUTDOWN_GRACE_PERIOD", "5"))

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "info")
    log_json: bool = _env_bool("LOG_JSON", "false")

    @property
    def prompts(self) -> PromptTemplates:
        """Prompt templates as a single value for the prompt builder."""
        return PromptTemplates(
            system=self.prompt_system,
            translate=self.prompt_translate,
            translate_on_context=self.prompt_translate_on_context,
            format=self.prompt_format,
            summarize=self.prompt_summarize,
        )

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.rate_limit_rate <= 0:
            raise ValueError("RATE_LIMIT_RATE must be positive")

        if self.rate_limit_burst < 1:
            raise ValueError("RATE_LIMIT_BURST must be at least 1")

        if self.rate_limit_ttl <= 0:
            raise ValueError("RATE_LIMIT_TTL must be positive")

        if self.max_param_length < 1:
            raise ValueError("MAX_PARAM_LENGTH must be at least 1")

        if self.max_url_length < self.max_param_length:
            raise ValueError(
                f"MAX_URL_LENGTH ({self.max_url_length}) must not be smaller than "
                f"MAX_PARAM_LENGTH ({self.max_param_length})"
            )

        if self.storage_timeout <= 0:
            raise ValueError("STORAGE_TIMEOUT must be positive")

        if self.llm_timeout <= 0:
            raise ValueError("LLM_TIMEOUT must be positive")

        if self.shutdown_grace_period < 0:
            raise ValueError("SHUTDOWN_GRACE_PERIOD must not be negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings) -> redis.Redis:
    """Create an asyncio Redis client instance."""
    return redis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
        socket_timeout=settings.storage_timeout,
        socket_connect_timeout=settings.storage_timeout,
    )
