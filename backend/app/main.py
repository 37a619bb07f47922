# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Your configuration and DB
from app.config import settings
from app.core.db import init_db, close_db

from app.api.v1.routers import transcripts, webhook

from app.core.bootstrap import ensure_default_project
logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

# CORS (dashboard frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def on_startup():
    await init_db()
    # Seed the configured Voiceflow project on first run
    await ensure_default_project()
    if not settings.openai_api_key:
        logger.warning("[startup] OPENAI_API_KEY not set, transcripts will get the fallback analysis")

@app.on_event("shutdown")
async def on_shutdown():
    await close_db()

# REST
app.include_router(transcripts.router, prefix="/api/v1")

# Voiceflow webhook (kept at the path configured in Voiceflow)
app.include_router(webhook.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
