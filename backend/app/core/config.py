# backend/app/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    PROJECT_NAME: str = "Survey Analytics"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Analytics ────────────────────────────────────────────
    # Sous ce nombre de réponses → avertissement "données limitées"
    ANALYTICS_LOW_RESPONSE_THRESHOLD: int = 5
    # Écart minimal (en points) pour qualifier une tendance up/down
    ANALYTICS_TREND_THRESHOLD: float = 1.0
    # Réponse "complétée" à partir de ce pourcentage
    ANALYTICS_COMPLETION_THRESHOLD: float = 80.0
    # Clé de segment des réponses sans manager
    ANALYTICS_UNASSIGNED_SEGMENT: str = "unassigned"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra='ignore'
        )

settings = Settings()
