"""Environment-based service configuration."""

import os
from dataclasses import dataclass, field

DEFAULT_LOKALISE_API_BASE = "https://api.lokalise.com/api2"
DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class Settings:
    """Immutable service configuration read from environment variables."""

    service_name: str = "lokey"
    lokalise_api_token: str | None = field(default_factory=lambda: os.getenv("LOKALISE_API_TOKEN"))
    lokalise_project_id: str | None = field(default_factory=lambda: os.getenv("LOKALISE_PROJECT_ID"))
    lokalise_api_base: str = field(
        default_factory=lambda: os.getenv("LOKALISE_API_BASE", DEFAULT_LOKALISE_API_BASE)
    )
    openai_api_key: str | None = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    default_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", DEFAULT_MODEL))
    admin_password: str = field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin123"))
    user_password: str = field(default_factory=lambda: os.getenv("USER_PASSWORD", "user123"))
    environment: str = field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    allowed_origins: str = field(
        default_factory=lambda: os.getenv(
            "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000"
        )
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: os.getenv("LOG_FORMAT", "json"))

    def __post_init__(self) -> None:
        object.__setattr__(self, "log_level", self.log_level.upper())

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def users(self) -> dict[str, str]:
        """Login id -> password."""
        return {"admin": self.admin_password, "user": self.user_password}
