"""Settings for the kanban API, read from the environment (and an optional .env)."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


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


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str = "mongodb://localhost:27017/"
    database_name: str = "projectfsd"
    port: int = 5000
    cors_origins: tuple = ("*",)
    db_connect_retries: int = 5
    db_connect_delay: float = 3.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        mongodb_uri=os.getenv("MONGODB_URI", Settings.mongodb_uri),
        database_name=os.getenv("DATABASE_NAME", Settings.database_name),
        port=_env_int("PORT", Settings.port),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        db_connect_retries=max(1, _env_int("DB_CONNECT_RETRIES", Settings.db_connect_retries)),
        db_connect_delay=_env_float("DB_CONNECT_DELAY", Settings.db_connect_delay),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level).upper(),
    )
