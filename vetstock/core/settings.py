"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env

Les variables d'environnement priment toujours sur le fichier; une valeur vide est ignorée.
"""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def resolve_env_file(cwd: Path | None = None) -> Path:
    """Fichier .env retenu au chargement du module."""
    explicit = os.getenv("ENV_FILE")
    if explicit:
        return Path(explicit)
    base = cwd or Path.cwd()
    specific = base / f".env.{os.getenv('APP_ENV', 'dev')}"
    return specific if specific.exists() else base / ".env"


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=resolve_env_file(),
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "vetstock-backend"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Session (JWT signé stocké dans un cookie HttpOnly)
    SESSION_SECRET: str = "vetstock-secret-key"
    SESSION_ALG: str = "HS256"
    SESSION_COOKIE_NAME: str = "vetstock_session"
    SESSION_MAX_AGE_DAYS: int = 7
    SESSION_COOKIE_SECURE: bool = False

    # Règles métier
    TRIAL_DAYS: int = 7
    VACCINE_ALERT_DAYS: int = 30
    ENFORCE_SUBSCRIPTION: bool = True
    ALLOW_ADMIN_SIGNUP: bool = False

    # Compte administrateur créé au démarrage
    SEED_ADMIN: bool = True
    ADMIN_NAME: str = "Administrador"
    ADMIN_EMAIL: str = "admin@vetstock.com"
    ADMIN_PASSWORD: str = "admin123"

    # Stockage
    REDIS_URL: str | None = None
    REQUIRE_REDIS: bool = False

    # Stripe
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_PRICE_ID: str = "price_1234567890"
    STRIPE_WEBHOOK_SECRET: str | None = None


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
