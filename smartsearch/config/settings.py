"""
Service configuration

Every value can be overridden by an environment variable of the same name
(case-insensitive). `.env` files are deliberately not read.
"""

from functools import lru_cache
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource
import json

DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_ALLOWED_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Runtime settings for the smart search service"""

    # Service
    app_name: str = "SQL Smart Search"
    environment: str = Field(default="development", env="ENVIRONMENT")
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=8000, env="PORT")
    allowed_origins_str: str = Field(default=json.dumps(DEFAULT_ALLOWED_ORIGINS), env="ALLOWED_ORIGINS")

    # Search input and output bounds
    max_query_length: int = Field(
        default=500,
        env="MAX_QUERY_LENGTH",
        description="Longest accepted search query in characters"
    )
    fallback_pattern_length: int = Field(
        default=50,
        env="FALLBACK_PATTERN_LENGTH",
        description="Characters of the query used for the text-search fallback pattern"
    )
    max_suggestions: int = Field(default=5, env="MAX_SUGGESTIONS")

    # Generative interpretation (optional)
    llm_enabled: bool = Field(
        default=False,
        env="LLM_ENABLED",
        description="Ask the generative model for a candidate before applying rule-based hints"
    )
    llm_timeout_seconds: float = Field(default=10.0, env="LLM_TIMEOUT_SECONDS")
    few_shot_examples: int = Field(
        default=2,
        env="FEW_SHOT_EXAMPLES",
        description="Worked examples per category included in the interpretation prompt"
    )

    # Bedrock
    aws_region: str = Field(default=DEFAULT_AWS_REGION, env="AWS_REGION")
    bedrock_model_id: str = Field(
        default="us.amazon.nova-lite-v1:0",
        env="BEDROCK_MODEL_ID",
        description="Bedrock model or inference profile used for query interpretation"
    )
    max_tokens: int = Field(default=1000, env="MAX_TOKENS")
    temperature: float = Field(default=0.1, env="TEMPERATURE")

    model_config = SettingsConfigDict(case_sensitive=False, env_parse_none_str="null")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Constructor arguments, then the process environment, then secret files
        return init_settings, env_settings, file_secret_settings

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("max_query_length", "few_shot_examples")
    @classmethod
    def validate_non_negative(cls, v, info):
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative")
        return v

    @field_validator("fallback_pattern_length", "max_suggestions")
    @classmethod
    def validate_at_least_one(cls, v, info):
        # The text fallback pattern and the suggestion list are never empty
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @field_validator("llm_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("llm_timeout_seconds must be positive")
        return v

    @property
    def allowed_origins(self) -> List[str]:
        """CORS origins from a JSON array or a comma-separated list."""
        raw = (self.allowed_origins_str or "").strip()
        if not raw:
            return list(DEFAULT_ALLOWED_ORIGINS)

        if raw.startswith("["):
            try:
                parsed = json.loads(raw)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [str(origin) for origin in parsed]

        return [origin.strip() for origin in raw.strip("[]").split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
