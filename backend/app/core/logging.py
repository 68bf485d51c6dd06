# backend/app/core/logging.py
"""
Configuration du logging applicatif.

Un logger par module (logging.getLogger(__name__)), configuré une seule
fois au démarrage depuis main.py. L'engine ne logge qu'en DEBUG.
"""
import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Installe le handler racine. Idempotent : un second appel ne duplique rien."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    if any(getattr(h, "_analytics_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._analytics_handler = True
    root.addHandler(handler)
