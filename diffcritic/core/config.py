from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str) -> AliasChoices:
    """Accept both the GitHub Actions input form and the plain variable name."""
    return AliasChoices(f"INPUT_{name}", name)


class Settings(BaseSettings):  # type: ignore[misc]
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )

    # GitHub
    github_token: SecretStr = Field(default=..., validation_alias=_env("GITHUB_TOKEN"))
    github_api_url: str = Field(
        default="https://api.github.com", validation_alias=_env("GITHUB_API_URL")
    )
    github_event_path: str = Field(default="", validation_alias=_env("GITHUB_EVENT_PATH"))
    github_event_name: str = Field(default="", validation_alias=_env("GITHUB_EVENT_NAME"))

    # Completion service
    openai_api_key: SecretStr = Field(default=..., validation_alias=_env("OPENAI_API_KEY"))
    openai_api_model: str = Field(default="gpt-4", validation_alias=_env("OPENAI_API_MODEL"))
    openai_timeout_seconds: float = Field(
        default=120.0, gt=0, validation_alias=_env("OPENAI_TIMEOUT_SECONDS")
    )

    # Review Settings
    exclude: str = Field(default="", validation_alias=_env("EXCLUDE"))
    max_concurrent_units: int = Field(
        default=1, ge=1, validation_alias=_env("MAX_CONCURRENT_UNITS")
    )
    validate_line_numbers: bool = Field(
        default=True, validation_alias=_env("VALIDATE_LINE_NUMBERS")
    )

    # Observability
    metrics_pushgateway_url: str | None = Field(
        default=None, validation_alias=_env("METRICS_PUSHGATEWAY_URL")
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
