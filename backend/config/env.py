from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field
from typing import List, Optional

class RateLimitConfig(BaseModel):
    """Per-user limit on text submissions (fixed window)."""
    max_requests: int = Field(
        default=5,
        description="Number of generation requests allowed per window"
    )
    window_seconds: int = Field(
        default=60,
        description="Length of the rate limit window in seconds"
    )

class GenerationConfig(BaseModel):
    """Configuration for the text-to-flashcards generation workflow."""
    backend: str = Field(
        default="heuristic",
        description="Card generation backend: 'heuristic' or 'openrouter'"
    )
    simulate_delay: bool = Field(
        default=True,
        description="Wait a length-proportional delay before generating"
    )
    min_delay_ms: int = Field(
        default=2000,
        description="Lower bound of the simulated processing delay"
    )
    max_delay_ms: int = Field(
        default=5000,
        description="Upper bound of the simulated processing delay"
    )

class OpenRouterConfig(BaseModel):
    """Configuration for the OpenRouter chat completion backend."""
    api_key: Optional[str] = Field(
        default=None,
        description="OpenRouter API key"
    )
    base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API base URL"
    )
    model: str = Field(
        default="openai/gpt-4o-mini",
        description="Model identifier used for generation"
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature"
    )
    max_tokens: int = Field(
        default=2000,
        description="Maximum tokens in the completion"
    )
    max_retries: int = Field(
        default=3,
        description="Maximum number of attempts for retryable failures"
    )
    backoff_base_seconds: float = Field(
        default=1.0,
        description="Base of the exponential backoff between attempts"
    )
    referer: str = Field(
        default="https://10xcards.app",
        description="Value sent in the HTTP-Referer header"
    )

class Settings(BaseSettings):
    # Database settings
    database_url: str = Field(
        default="sqlite:///./tenxcards.db",
        description="Database connection URL"
    )

    # API settings
    api_title: str = Field(
        default="10xCards API",
        description="API title for documentation"
    )
    api_description: str = Field(
        default="API for managing flashcards, card sets and AI-assisted card generation",
        description="API description for documentation"
    )
    api_version: str = Field(
        default="1.0.0",
        description="API version"
    )
    cors_origins: List[str] = Field(
        default=["*"],
        description="Origins allowed by the CORS middleware"
    )

    # Logging settings
    log_dir: Optional[str] = Field(
        default=None,
        description="Directory for log files, defaults to <repo>/logs"
    )
    log_level: str = Field(
        default="INFO",
        description="Console log level"
    )

    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate limiting of generation requests"
    )
    generation: GenerationConfig = Field(
        default_factory=GenerationConfig,
        description="Generation workflow configuration"
    )
    openrouter: OpenRouterConfig = Field(
        default_factory=OpenRouterConfig,
        description="OpenRouter backend configuration"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_nested_delimiter = "__"
        extra = "ignore"  # Allow extra fields in environment without validation errors

settings = Settings()
