import os
from dataclasses import dataclass, field
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Runtime
    environment: str = os.getenv("ENVIRONMENT", "production")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "3000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"
    cors_origins: tuple[str, ...] = field(
        default_factory=lambda: _env_list(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5500,http://127.0.0.1:3000",
        )
    )
    static_dir: str = os.getenv("STATIC_DIR", "public")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./portfolio.db")
    db_echo: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    # Redis (optional: absent means in-memory fallback mode)
    redis_url: str | None = os.getenv("REDIS_URL") or None
    redis_connect_timeout: float = float(os.getenv("REDIS_CONNECT_TIMEOUT", "5"))
    redis_max_retries: int = int(os.getenv("REDIS_MAX_RETRIES", "3"))
    redis_retry_base_delay: float = float(os.getenv("REDIS_RETRY_BASE_DELAY", "0.5"))
    redis_retry_max_delay: float = float(os.getenv("REDIS_RETRY_MAX_DELAY", "5"))

    # Queue
    queue_prefix: str = os.getenv("QUEUE_PREFIX", "portfolio:queue")

    # AI completion provider
    ai_api_url: str | None = os.getenv("AI_API_URL") or None
    ai_api_key: str | None = os.getenv("AI_API_KEY") or None

    # Chat
    chat_request_timeout: float = float(os.getenv("CHAT_REQUEST_TIMEOUT", "10"))
    chat_socket_timeout: float = float(os.getenv("CHAT_SOCKET_TIMEOUT", "5"))
    chat_max_turns: int = int(os.getenv("CHAT_MAX_TURNS", "200"))  # 0 disables trimming
    chat_history_cache_ttl: int = int(os.getenv("CHAT_HISTORY_CACHE_TTL", "60"))

    # Email (optional: absent means emails are only logged)
    email_user: str | None = os.getenv("EMAIL_USER") or None
    email_pass: str | None = os.getenv("EMAIL_PASS") or None
    smtp_host: str = os.getenv("SMTP_HOST", "smtp.gmail.com")
    smtp_port: int = int(os.getenv("SMTP_PORT", "465"))
    email_sender_name: str = os.getenv("EMAIL_SENDER_NAME", "Portfolio")

    # Analytics
    analytics_queue_size: int = int(os.getenv("ANALYTICS_QUEUE_SIZE", "1000"))
    admin_token: str | None = os.getenv("ADMIN_TOKEN") or None

    @property
    def is_development(self) -> bool:
        """Check if detailed error messages may be exposed.

        Returns:
            True when running in development mode, False otherwise
        """
        return self.environment.lower() == "development"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.redis_max_retries < 0:
            raise ValueError("REDIS_MAX_RETRIES must be >= 0")

        if self.redis_retry_base_delay < 0 or self.redis_retry_max_delay < 0:
            raise ValueError("Redis retry delays must be >= 0")

        if self.chat_history_cache_ttl <= 0:
            raise ValueError("CHAT_HISTORY_CACHE_TTL must be positive")

        if self.chat_request_timeout <= 0 or self.chat_socket_timeout <= 0:
            raise ValueError("Chat timeouts must be positive")

        if self.chat_max_turns < 0:
            raise ValueError(f"CHAT_MAX_TURNS must be >= 0, got {self.chat_max_turns}")

        if self.analytics_queue_size <= 0:
            raise ValueError("ANALYTICS_QUEUE_SIZE must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
