"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "nouvel-ayiti"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = False
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 5000
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    CORS_ORIGINS: list[AnyHttpUrl] | list[str] = []

    # Stockage: "memory" | "sql" | "redis"
    STORAGE_BACKEND: Literal["memory", "sql", "redis"] = "memory"
    DATABASE_URL: str | None = None
    REDIS_URL: str | None = None
    REQUIRE_REDIS: bool = False

    # JWT/Auth
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MIN: int = 60 * 24 * 7
    ADMIN_USERNAME: str | None = None
    ADMIN_PASSWORD: str | None = None

    # Contenu
    SEED_SAMPLE_DATA: bool = True
    # "accept": les votes sont enregistrés même si le sondage est inactif
    # "reject": un sondage inactif refuse les votes (409)
    POLL_CLOSED_VOTE_POLICY: Literal["accept", "reject"] = "accept"
    DEFAULT_LANGUAGE: Literal["ht", "fr", "en"] = "ht"
    POPULAR_ARTICLES_LIMIT: int = 5

    OTLP_ENDPOINT: str | None = None


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
