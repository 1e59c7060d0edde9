"""Configuration settings for the application."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical

    # Agent boundary
    AGENT_BACKEND: str = "local"  # Options: local, http
    AGENT_ENDPOINT: str = "http://localhost:8080/mcp"
    AGENT_ID: str = "security-sales-tool"
    AGENT_TIMEOUT: float = 30.0

    # Catalog / tools
    DEFAULT_CATEGORY: str = "home"
    PURCHASE_BASE_URL: str = "https://shop.example.com/checkout"

    # Conversation
    GREETING: str = (
        "Hello! How can I assist you today? "
        "Try asking about 'home' or 'business' security packages."
    )

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
