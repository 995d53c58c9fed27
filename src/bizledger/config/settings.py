"""Configuration settings for bizledger."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: SecretStr = Field(..., validation_alias="OPENAI_API_KEY")
    openai_base_url: str | None = Field(default=None, validation_alias="OPENAI_BASE_URL")
    gpt_model: str = Field(default="gpt-4o-mini", validation_alias="GPT_MODEL")

    # LLM parameters
    llm_max_tokens: int = Field(default=1024, validation_alias="LLM_MAX_TOKENS")
    transaction_temperature: float = Field(
        default=0.7, validation_alias="TRANSACTION_TEMPERATURE"
    )
    document_temperature: float = Field(
        default=0.3, validation_alias="DOCUMENT_TEMPERATURE"
    )

    # Invoicing
    default_tax_rate: Decimal = Field(
        default=Decimal("18"), validation_alias="DEFAULT_TAX_RATE"
    )
    invoice_due_days: int = Field(default=15, validation_alias="INVOICE_DUE_DAYS")

    # Free plan
    free_transaction_limit: int = Field(
        default=5, validation_alias="FREE_TRANSACTION_LIMIT"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
