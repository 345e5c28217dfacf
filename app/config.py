"""Application configuration settings."""
from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Environnement d'exécution: "dev" | "staging" | "prod"
ENV = os.getenv("CAISSE_ENV", "dev").lower()


class Settings(BaseSettings):
    """Environment configuration for the caisse backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///caisse.db"
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Caisse ----------------------------------------------------------
    CURRENCY_LABEL: str = "FCFA"
    # Exiger aussi le budget de la période (mois/année) pour les paiements tagués.
    ENFORCE_PERIOD_BUDGET: bool = False
    # Écart toléré (en unités monétaires) avant de signaler une dérive.
    DRIFT_TOLERANCE: Decimal = Decimal("1")

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8"
    )

    @field_validator("CURRENCY_LABEL")
    @classmethod
    def _strip_currency_label(cls, value: str) -> str:
        """Normalise the currency label; an empty value falls back to FCFA."""

        cleaned = value.strip()
        return cleaned or "FCFA"


class AppInfo(BaseModel):
    name: str = "caisse-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
