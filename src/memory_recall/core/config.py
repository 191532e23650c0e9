"""Configuration management."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database. Read when the engine is first acquired, not at import.
    database_url: SecretStr | None = Field(default=None, description="PostgreSQL connection URL")
    memory_table: str = Field(default="fawn_memories", description="Table holding memory rows")
    db_pool_size: int = Field(default=10, ge=1)
    db_max_overflow: int = Field(default=5, ge=0)
    db_pool_pre_ping: bool = True
    db_echo: bool = False

    # Retrieval defaults
    default_limit: int = Field(default=10, ge=1)
    default_threshold: float = Field(default=0.7, ge=-1.0, le=1.0)
    embedding_dimensions: int | None = Field(
        default=None, ge=1, description="Expected embedding length; unchecked when unset"
    )
    semantic_search_enabled: bool = Field(
        default=True, description="When false every recall uses the lexical fallback"
    )

    # App config
    debug: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # Ignore extra fields in .env file
    )


settings = Settings()
