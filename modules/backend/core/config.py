"""
Configuration.

Two sources, nothing hardcoded:

    config/.env             secrets only (Settings, pydantic-settings)
    config/settings/*.yaml  everything else (AppConfig, one validated
                            Pydantic schema per file)

Both are cached; tests clear the caches with get_settings.cache_clear()
and get_app_config.cache_clear().
"""

from functools import lru_cache
from pathlib import Path
from typing import Any
from urllib.parse import quote_plus

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.backend.core.config_schema import (
    ApplicationSchema,
    CompanySchema,
    ConcurrencySchema,
    DatabaseSchema,
    FeaturesSchema,
    IntegrationsSchema,
    LoggingSchema,
    ObservabilitySchema,
    SecuritySchema,
)

PROJECT_MARKER = ".project_root"


def find_project_root() -> Path:
    """Walk up from the working directory to the folder holding .project_root."""
    current = Path.cwd()
    while current != current.parent:
        if (current / PROJECT_MARKER).exists():
            return current
        current = current.parent
    raise RuntimeError(f"Project root not found. Ensure {PROJECT_MARKER} file exists.")


def validate_project_root() -> Path:
    """find_project_root() for entry scripts: exits with the message instead of raising."""
    try:
        return find_project_root()
    except RuntimeError as e:
        raise SystemExit(f"Error: {e}") from e


def load_yaml_config(filename: str) -> dict[str, Any]:
    """Raw contents of config/settings/<filename>; an empty file gives {}."""
    config_path = find_project_root() / "config" / "settings" / filename
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


class Settings(BaseSettings):
    """Secrets from config/.env or the environment."""

    db_password: str
    redis_password: str
    jwt_secret: str
    ms_graph_client_secret: str
    bunny_storage_api_key: str

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppConfig:
    """
    Every YAML settings file, validated when the object is built.

    A missing key, wrong type or unknown field fails here with the file
    name in the message, not later as an AttributeError.
    """

    application: ApplicationSchema
    database: DatabaseSchema
    logging: LoggingSchema
    features: FeaturesSchema
    security: SecuritySchema
    observability: ObservabilitySchema
    concurrency: ConcurrencySchema
    integrations: IntegrationsSchema
    company: CompanySchema

    def __init__(self) -> None:
        for section, schema in type(self).__annotations__.items():
            setattr(self, section, self._load(schema, f"{section}.yaml"))

    @staticmethod
    def _load(schema: type[BaseModel], filename: str) -> BaseModel:
        raw = load_yaml_config(filename)
        try:
            return schema(**raw)
        except ValidationError as e:
            raise ValueError(f"Invalid configuration in {filename}:\n{e}") from e


@lru_cache
def get_settings() -> Settings:
    return Settings(_env_file=str(find_project_root() / "config" / ".env"))


@lru_cache
def get_app_config() -> AppConfig:
    return AppConfig()


def get_database_url(async_driver: bool = True) -> str:
    """PostgreSQL URL; asyncpg for the application, plain psycopg for tooling."""
    db = get_app_config().database
    password = quote_plus(get_settings().db_password)
    driver = "postgresql+asyncpg" if async_driver else "postgresql"
    return f"{driver}://{db.user}:{password}@{db.host}:{db.port}/{db.name}"


def get_redis_url() -> str:
    """URL of the Redis instance behind the taskiq broker."""
    redis = get_app_config().database.redis
    password = quote_plus(get_settings().redis_password)
    return f"redis://:{password}@{redis.host}:{redis.port}/{redis.db}"
