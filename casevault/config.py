import logging
import warnings

from pydantic_settings import BaseSettings

# Default alphabet shipped with sqids; deployments are expected to shuffle it.
DEFAULT_SQIDS_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class Settings(BaseSettings):
    # Environment
    environment: str = "development"  # development | test | production
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Database (sqlite for local dev, postgresql+asyncpg for production)
    database_url: str = "sqlite+aiosqlite:///./data/casevault.db"

    # Object store: Azure Blob Storage when a connection string is set
    azure_storage_connection_string: str = ""
    azure_storage_container: str = "case-content"

    # Object store: local versioned filesystem fallback
    content_store_path: str = "./data/content_store"
    content_store_container: str = "case-content"

    # Short ids (changing either value invalidates every issued token)
    sqids_alphabet: str = DEFAULT_SQIDS_ALPHABET
    sqids_min_length: int = 10

    # Auth
    jwt_secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 12

    # CORS
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()

# Warn on insecure defaults (logged at startup, not a hard error for dev convenience)
_logger = logging.getLogger("casevault.config")
_INSECURE_SECRETS = {
    "dev-secret-change-in-production",
    "change-me-to-a-random-string",
}


def validate_security_posture(cfg: Settings) -> None:
    is_prod = cfg.environment.lower() in {"production", "prod"}

    if cfg.jwt_secret_key in _INSECURE_SECRETS:
        if is_prod:
            raise RuntimeError(
                "FATAL: JWT_SECRET_KEY is set to an insecure default. "
                "Set a strong random secret via the JWT_SECRET_KEY environment variable before deploying to production."
            )
        warnings.warn(
            "JWT_SECRET_KEY is set to the default insecure value. "
            "Set a strong random secret via the JWT_SECRET_KEY environment variable for production.",
            stacklevel=1,
        )

    if cfg.sqids_alphabet == DEFAULT_SQIDS_ALPHABET:
        if is_prod:
            raise RuntimeError(
                "FATAL: SQIDS_ALPHABET is the public default alphabet. "
                "Set a shuffled alphabet via the SQIDS_ALPHABET environment variable before deploying to production."
            )
        _logger.warning(
            "SQIDS_ALPHABET is the public default alphabet; issued ids are trivially decodable. "
            "Configure a shuffled alphabet for production."
        )

    if cfg.cors_origins == "*":
        if is_prod:
            raise RuntimeError(
                "FATAL: CORS_ORIGINS cannot be '*' in production. "
                "Set explicit trusted origins via the CORS_ORIGINS environment variable."
            )
        _logger.warning(
            "CORS_ORIGINS is set to '*' (allow all). "
            "Configure specific origins for production via the CORS_ORIGINS environment variable."
        )


validate_security_posture(settings)
