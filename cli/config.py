"""Configuration management for the CLI tool."""

from pydantic import BaseModel, Field


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(
        default="localhost",
        description="Server host",
    )
    port: int = Field(
        default=8000,
        description="Server port",
    )
    api_prefix: str = Field(
        default="/api/v1",
        description="Path prefix of the chat routes",
    )
    timeout: float = Field(
        default=120.0,
        description="Per-request timeout in seconds",
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"http://{self.host}:{self.port}"

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat"

    @property
    def history_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat/history"

    @property
    def rating_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat/rating"
