# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_base.py

Base de configuración (Pydantic v2) para Vidmarket.
- Esta clase NO instancia singletons ni resuelve .env; eso lo hace config_loader.
- Es la base para settings_dev.py, settings_testing.py y settings_prod.py.

Autor: Vidmarket
Fecha: 2026-10-19
"""

from typing import Literal, Optional
from pydantic import Field, SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Tipos de entorno soportados
EnvName = Literal["development", "test", "production"]


class BaseAppSettings(BaseSettings):
    # =========================
    # Núcleo de la aplicación
    # =========================
    python_env: EnvName = Field(default="development", validation_alias="PYTHON_ENV")
    app_name: str = Field(default="Vidmarket", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    app_host: str = Field(default="0.0.0.0", validation_alias="APP_HOST")
    app_port: int = Field(default=8000, validation_alias="APP_PORT")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # =========================
    # Base de datos (PostgreSQL)
    # =========================
    db_user: str = Field(default="postgres", validation_alias="DB_USER")
    db_password: SecretStr = Field(default=SecretStr("postgres"), validation_alias="DB_PASSWORD")
    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="vidmarket", validation_alias="DB_NAME")
    db_pool_size: int = Field(default=5, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=5, validation_alias="DB_MAX_OVERFLOW")
    db_pool_pre_ping: bool = Field(default=True, validation_alias="DB_POOL_PRE_PING")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")
    db_url: Optional[str] = Field(default=None, validation_alias="DB_URL")

    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        """
        URL completa para SQLAlchemy async.
        Prioriza DB_URL si existe (normaliza el esquema de Postgres a asyncpg);
        si no, la construye desde los componentes individuales.
        """
        from urllib.parse import quote_plus

        if self.db_url:
            return (
                self.db_url.replace("postgres://", "postgresql+asyncpg://")
                .replace("postgresql://", "postgresql+asyncpg://")
            )

        pw = quote_plus(self.db_password.get_secret_value())
        return (
            f"postgresql+asyncpg://{self.db_user}:{pw}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================
    # Redis (store compartido: locks, caché, tokens)
    # =========================
    redis_url: Optional[str] = Field(default=None, validation_alias="REDIS_URL")
    redis_socket_timeout_sec: float = Field(default=2.0, validation_alias="REDIS_SOCKET_TIMEOUT_SEC")

    # =========================
    # CORS
    # =========================
    allowed_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # =========================
    # Auth / JWT
    # =========================
    jwt_secret_key: SecretStr = Field(default=SecretStr("please-change-me"), validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(default="HS256", validation_alias="JWT_ALGORITHM")

    # =========================
    # Pasarela de pago (Stripe)
    # =========================
    stripe_secret_key: Optional[SecretStr] = Field(default=None, validation_alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: Optional[SecretStr] = Field(default=None, validation_alias="STRIPE_WEBHOOK_SECRET")
    currency: str = Field(default="usd", validation_alias="CURRENCY")

    # =========================
    # Compras y fulfillment
    # =========================
    purchase_pending_window_minutes: int = Field(default=30, validation_alias="PURCHASE_PENDING_WINDOW_MINUTES")
    purchase_lock_ttl_seconds: int = Field(default=300, validation_alias="PURCHASE_LOCK_TTL_SECONDS")
    fulfillment_lock_ttl_seconds: int = Field(default=300, validation_alias="FULFILLMENT_LOCK_TTL_SECONDS")
    fulfillment_marker_ttl_seconds: int = Field(default=86400, validation_alias="FULFILLMENT_MARKER_TTL_SECONDS")
    payment_intent_cache_ttl_seconds: int = Field(default=3600, validation_alias="PAYMENT_INTENT_CACHE_TTL_SECONDS")
    lock_retry_attempts: int = Field(default=3, validation_alias="LOCK_RETRY_ATTEMPTS")
    lock_retry_delay_ms: int = Field(default=200, validation_alias="LOCK_RETRY_DELAY_MS")

    # Paginación (historial / ventas)
    page_size_default: int = Field(10, validation_alias="DEFAULT_PAGE_SIZE")
    page_size_max: int = Field(100, validation_alias="MAX_PAGE_SIZE")

    # =========================
    # Acceso a video
    # =========================
    entitlement_cache_ttl_seconds: int = Field(default=3600, validation_alias="ENTITLEMENT_CACHE_TTL_SECONDS")
    stream_token_ttl_seconds: int = Field(default=14400, validation_alias="STREAM_TOKEN_TTL_SECONDS")
    download_token_ttl_seconds: int = Field(default=3600, validation_alias="DOWNLOAD_TOKEN_TTL_SECONDS")
    stream_rate_limit: int = Field(default=100, validation_alias="STREAM_RATE_LIMIT")
    stream_rate_window_seconds: int = Field(default=3600, validation_alias="STREAM_RATE_WINDOW_SECONDS")
    webhook_rate_limit_per_minute: int = Field(default=120, validation_alias="WEBHOOK_RATE_LIMIT_PER_MINUTE")

    # =========================
    # Observabilidad / Logging
    # =========================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["json", "pretty", "plain"] = Field(default="pretty", validation_alias="LOG_FORMAT")

    # ===== Helpers de entorno =====
    @computed_field  # type: ignore[misc]
    @property
    def is_dev(self) -> bool:
        return self.python_env == "development"

    @computed_field  # type: ignore[misc]
    @property
    def is_test(self) -> bool:
        return self.python_env == "test"

    @computed_field  # type: ignore[misc]
    @property
    def is_prod(self) -> bool:
        return self.python_env == "production"

    def get_cors_origins(self) -> list[str]:
        """Convierte allowed_origins en lista procesable para CORS middleware."""
        if not self.allowed_origins or self.allowed_origins == "*":
            return ["*"]
        return [o.strip().strip('"').strip("'") for o in self.allowed_origins.split(",") if o.strip()]

    def _security_and_payments_checks(self) -> None:
        """
        Validaciones mínimas de seguridad y coherencia.
        Se invoca desde config_loader tras instanciar el settings.
        """
        import logging
        logger = logging.getLogger(__name__)

        jwt_key = self.jwt_secret_key.get_secret_value()
        weak_jwt = not jwt_key or jwt_key == "please-change-me" or len(jwt_key) < 32

        if self.is_prod:
            if weak_jwt:
                raise ValueError("JWT_SECRET_KEY debe tener ≥32 caracteres en producción")
            if not self.stripe_secret_key or not self.stripe_webhook_secret:
                raise ValueError("STRIPE_SECRET_KEY y STRIPE_WEBHOOK_SECRET son requeridos en producción")
            if not self.redis_url:
                raise ValueError("REDIS_URL es requerido en producción (locks distribuidos)")

        if self.is_dev:
            if weak_jwt:
                logger.info("JWT_SECRET_KEY es débil o usa valor por defecto")
            if not self.redis_url:
                logger.info("REDIS_URL no configurado: se usará el store en memoria (un solo proceso)")

        if self.purchase_pending_window_minutes <= 0:
            raise ValueError("PURCHASE_PENDING_WINDOW_MINUTES debe ser > 0")
        if self.lock_retry_attempts < 0:
            raise ValueError("LOCK_RETRY_ATTEMPTS no puede ser negativo")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


__all__ = ["BaseAppSettings", "EnvName"]
# Fin del archivo backend/app/shared/config/settings_base.py
