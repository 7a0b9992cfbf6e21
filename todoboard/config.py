"""
Service configuration loaded from environment variables.
"""
import os
from typing import List, Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Runtime settings for the service."""

    def __init__(
        self,
        storage_backend: str = "auto",
        db_path: str = "data/todo.db",
        json_db_path: str = "data/db.json",
        default_username: str = "admin",
        default_password: str = "admin123",
        bcrypt_rounds: int = 10,
        auth_realm: str = "TODO Application",
        cors_origins: Optional[List[str]] = None,
        host: str = "0.0.0.0",
        port: int = 3000,
        log_level: str = "INFO",
        slow_query_threshold: float = 0.1,
        tracing_enabled: bool = False,
        otlp_endpoint: Optional[str] = None,
    ):
        self.storage_backend = storage_backend.lower()
        self.db_path = db_path
        self.json_db_path = json_db_path
        self.default_username = default_username
        self.default_password = default_password
        self.bcrypt_rounds = bcrypt_rounds
        self.auth_realm = auth_realm
        self.cors_origins = cors_origins if cors_origins is not None else ["*"]
        self.host = host
        self.port = port
        self.log_level = log_level.upper()
        self.slow_query_threshold = slow_query_threshold
        self.tracing_enabled = tracing_enabled
        self.otlp_endpoint = otlp_endpoint

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from TODO_* and related environment variables."""
        origins = os.getenv("TODO_CORS_ORIGINS", "*")
        return cls(
            storage_backend=os.getenv("TODO_STORAGE_BACKEND", "auto"),
            db_path=os.getenv("TODO_DB_PATH", "data/todo.db"),
            json_db_path=os.getenv("TODO_JSON_DB_PATH", "data/db.json"),
            default_username=os.getenv("TODO_DEFAULT_USERNAME", "admin"),
            default_password=os.getenv("TODO_DEFAULT_PASSWORD", "admin123"),
            bcrypt_rounds=_env_int("TODO_BCRYPT_ROUNDS", 10),
            auth_realm=os.getenv("TODO_AUTH_REALM", "TODO Application"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            host=os.getenv("TODO_SERVICE_HOST", "0.0.0.0"),
            port=_env_int("TODO_SERVICE_PORT", 3000),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            slow_query_threshold=_env_float("DB_QUERY_SLOW_THRESHOLD", 0.1),
            tracing_enabled=_env_bool("OTEL_TRACING_ENABLED", False),
            otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
        )
