"""Configuration management using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=7788, description="Server port")
    debug: bool = Field(default=False, description="Debug mode")

    # Database Configuration
    database_path: str = Field(default="./data/insight_agent.db", description="DuckDB database file")

    # Anthropic Configuration
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(default="claude-sonnet-4-6", description="Model used by the agent loop")
    anthropic_max_tokens: int = Field(default=4096, description="Max tokens per model turn")
    model_timeout_seconds: float = Field(default=120.0, description="Timeout for one model call")

    # Agent Configuration
    agent_max_iterations: int = Field(default=6, description="Maximum model turns per request")
    tool_timeout_seconds: float = Field(default=60.0, description="Timeout for one tool call")
    default_row_limit: int = Field(default=100, description="Default rowLimit for analytics tools")
    conversation_list_limit: int = Field(default=20, description="Threads returned by the list endpoint")
    data_lag_days: int = Field(default=1, description="Days subtracted from today for the reference date")

    # Access Configuration
    operator_api_keys: str = Field(default="", description="Operator API keys (comma separated)")

    # Google OAuth Configuration
    google_client_id: Optional[str] = Field(default=None, description="Google OAuth client ID")
    google_client_secret: Optional[str] = Field(default=None, description="Google OAuth client secret")
    google_refresh_token: Optional[str] = Field(default=None, description="Google OAuth refresh token")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")
    log_file: str = Field(default="./logs/app.log", description="Log file path")

    def get_operator_api_keys(self) -> List[str]:
        """Get list of operator API keys."""
        return [key.strip() for key in self.operator_api_keys.split(",") if key.strip()]

    def google_oauth_configured(self) -> bool:
        """Whether a Google OAuth connection is available for analytics queries."""
        return bool(self.google_client_id and self.google_client_secret and self.google_refresh_token)


# Global settings instance
settings = Settings()
