"""Client configuration using Pydantic settings."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.xiaomimimo.com/v1"
DEFAULT_MODEL = "mimo-v2-flash"
DEFAULT_TIMEOUT = 60.0


class ClientConfig(BaseModel):
    """Immutable connection settings handed to MimoClient.

    The client never reads the environment on its own; build one of these
    explicitly or derive it from Settings.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(..., description="Pre-shared key sent in the api-key header.")
    base_url: str = Field(DEFAULT_BASE_URL, description="API root, without the /chat/completions suffix.")
    timeout: float = Field(DEFAULT_TIMEOUT, description="HTTP timeout in seconds.")

    @classmethod
    def default(cls, api_key: str) -> "ClientConfig":
        """Config pointing at the public MiMo endpoint."""
        return cls(api_key=api_key)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # MiMo API
    mimo_api_key: str = Field(
        ..., alias="MIMO_API_KEY",
        description="API key sent in the api-key header. Required.",
    )
    mimo_base_url: str = Field(
        DEFAULT_BASE_URL, alias="MIMO_BASE_URL",
        description="Base URL of the MiMo OpenAI-compatible API (e.g. https://api.xiaomimimo.com/v1).",
    )
    mimo_model: str = Field(
        DEFAULT_MODEL, alias="MIMO_MODEL",
        description="Default model name used by the CLI when --model is not given.",
    )
    mimo_timeout: float = Field(
        DEFAULT_TIMEOUT, alias="MIMO_TIMEOUT",
        description="HTTP request timeout in seconds for MiMo API calls.",
    )

    # Logging
    log_level: str = Field(
        "INFO", alias="LOG_LEVEL",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL.",
    )
    log_file: str = Field(
        "", alias="LOG_FILE",
        description="Path to log file for file-based logging with rotation. Empty = console only.",
    )
    log_file_max_bytes: int = Field(
        10_485_760, alias="LOG_FILE_MAX_BYTES",
        description="Max size in bytes per log file before rotation. Default: 10 MB.",
    )
    log_file_backup_count: int = Field(
        5, alias="LOG_FILE_BACKUP_COUNT",
        description="Number of rotated backup log files to keep.",
    )

    def client_config(self) -> ClientConfig:
        """Freeze the connection-related settings into a ClientConfig."""
        return ClientConfig(
            api_key=self.mimo_api_key,
            base_url=self.mimo_base_url,
            timeout=self.mimo_timeout,
        )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
