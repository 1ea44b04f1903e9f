from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración de la aplicación.
    Todo se puede sobreescribir con variables de entorno o un archivo .env
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Sistema de Inventarios Químicos - MIDA"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Base de datos
    DATABASE_URL: str = "sqlite:///./mida_inventario.db"

    # JWT
    SECRET_KEY: str = "cambiar-esta-clave-en-produccion"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # CORS, separados por coma
    CORS_ORIGINS: str = "*"

    # Límite global de peticiones por cliente (ventana fija)
    RATE_LIMIT: str = "100/15 minutes"
    RATE_LIMIT_ENABLED: bool = True

    LOG_LEVEL: str = "INFO"

    # Usuario administrador inicial (solo si SEED_DEFAULT_ADMIN=true)
    SEED_DEFAULT_ADMIN: bool = False
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_PASSWORD: str = ""
    DEFAULT_ADMIN_EMAIL: str = "admin@mida.gob.pa"
    DEFAULT_ADMIN_FULL_NAME: str = "Administrador del Sistema"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
