# main.py
"""
Point d'entrée de l'API Survey Analytics.
Enregistre les modules via leurs routers.

Architecture : modules verticaux (HTTP + orchestration) + engine pur.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.core.logging import configure_logging

from app.modules.analytics.router import router as analytics_router

configure_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analytics_router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": "1.0.0"}
