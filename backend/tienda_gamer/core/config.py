# backend/tienda_gamer/core/config.py
"""
Este archivo contiene la configuración de la aplicación.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path
import os

# Apunta al directorio 'backend/'
BASE_DIR = Path(__file__).resolve().parent.parent.parent

class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic BaseSettings.
    Variables sensibles desde .env, defaults seguros para el resto.
    """
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Configuración general del proyecto
    BASE_DIR: Path = BASE_DIR
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Tienda Gamer API"
    PROJECT_VERSION: str = "0.1.0"

    # Configuración de la base de datos
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "postgres")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "user")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "tienda_gamer_db")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")

    @property
    def DATABASE_URL(self) -> str:
        """URL de conexión a la base de datos asíncrona."""
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Configuración de Redis (almacenamiento durable de carritos)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    CART_KEY_PREFIX: str = "cart"
    CART_TTL_SECONDS: int = 60 * 60 * 24 * 30

    @property
    def REDIS_URL(self) -> str:
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}"

    # Mercado Pago - Token sensible del .env, el resto con defaults
    MERCADO_PAGO_ACCESS_TOKEN: Optional[str] = None
    MERCADO_PAGO_PUBLIC_KEY: str = "APP_USR-public-key"
    MERCADO_PAGO_API_URL: str = "https://api.mercadopago.com"
    MERCADO_PAGO_LOCALE: str = "es-CO"
    MERCADO_PAGO_NOTIFICATION_URL: Optional[str] = None
    PAYMENT_CURRENCY: str = "COP"
    PAYMENT_BRICK_KIND: str = "cardPayment"
    PAYMENT_CONTAINER_ID: str = "mercadopago-checkout"
    HTTP_TIMEOUT_SECONDS: float = 20.0

    # Página de éxito; lee payment_id y status de la URL
    PAYMENT_SUCCESS_PATH: str = "/payment/success"

    # Funciones de pago: "local" las ejecuta en este proceso, "http" llama a otro despliegue
    PAYMENT_FUNCTIONS_MODE: str = "local"
    FUNCTIONS_BASE_URL: str = "http://localhost:8000/api/v1/functions"

    # Logging - Defaults seguros
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # App Info - Del .env con defaults
    APP_ENVIRONMENT: str = "development"

    # Server - Del .env con defaults
    HOST: str = "0.0.0.0"
    PORT: int = 8000

# Instancia global de la configuración
settings = Settings()
