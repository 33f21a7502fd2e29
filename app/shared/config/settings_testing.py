# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_testing.py

Overrides para entorno de PRUEBAS (test) usando Pydantic v2.
Determinista: SQLite local, store en memoria, Stripe con claves dummy
y reintentos de lock cortos.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from typing import Literal, Optional

from pydantic import SecretStr
from pydantic_settings import SettingsConfigDict

from .settings_base import BaseAppSettings


class EnvTestingSettings(BaseAppSettings):
    # --- Identidad de entorno ---
    python_env: Literal["development", "test", "production"] = "test"

    # --- Logging en test: menos ruido ---
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_format: Literal["json", "pretty", "plain"] = "plain"

    # --- Base de datos aislada ---
    db_url: Optional[str] = "sqlite+aiosqlite:///./vidmarket_test.db"

    # --- Auth: secreto fijo de 32+ caracteres ---
    jwt_secret_key: SecretStr = SecretStr("test-secret-key-with-at-least-32-chars")

    # --- Stripe en modo test con valores dummy ---
    stripe_secret_key: Optional[SecretStr] = SecretStr("sk_test_dummy")
    stripe_webhook_secret: Optional[SecretStr] = SecretStr("whsec_test_dummy")

    # --- Locks: reintentos rápidos ---
    lock_retry_delay_ms: int = 10

    model_config = SettingsConfigDict(
        env_file=".env.test",
        env_file_encoding="utf-8",
        extra="ignore",
    )


__all__ = ["EnvTestingSettings"]
# Fin del archivo backend/app/shared/config/settings_testing.py
