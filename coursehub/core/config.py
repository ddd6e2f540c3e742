# coursehub/core/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import computed_field


class Settings(BaseSettings):
    """
    Gestiona la configuración de la aplicación cargando variables de entorno.
    Utiliza Pydantic para la validación de tipos.
    """
    model_config = SettingsConfigDict(
        env_file=".env", env_ignore_case=True, extra="ignore"
    )

    PROJECT_NAME: str = "CourseHub API"

    # --- Base de datos ---
    DATABASE_URL: str = "sqlite:///./coursehub.db"
    DATABASE_ECHO: bool = False

    # --- JWT Settings ---
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # --- Object storage (videos y miniaturas) ---
    STORAGE_ROOT: str = "./storage"
    STORAGE_BUCKET: str = "course-videos"
    STORAGE_PUBLIC_BASE_URL: str = "http://localhost:8000/storage/v1/object/public"
    MAX_VIDEO_SIZE_BYTES: int = 100 * 1024 * 1024  # 100MB

    # --- Reproductor ---
    AUTOSAVE_INTERVAL_SECONDS: int = 10

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    @computed_field
    @property
    def DATABASE_URI(self) -> str:
        """
        URI de conexión en formato SQLAlchemy. Acepta el prefijo 'postgres://'
        que entregan algunos proveedores y lo normaliza.
        """
        if self.DATABASE_URL.startswith("postgres://"):
            return self.DATABASE_URL.replace("postgres://", "postgresql+psycopg2://", 1)
        return self.DATABASE_URL


# Instancia única de la configuración que será usada en toda la aplicación.
settings = Settings()
