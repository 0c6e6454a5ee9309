"""
FastAPI application exposing the JSON repair pipeline.

Run with:
    uvicorn server.main:app --app-dir backend

Configuration (via environment variables, .env supported):
    LOG_LEVEL: loguru level for the server sink (default: "INFO")
    CORS_ORIGINS: Comma-separated allowed origins (default: "*")
"""

import os
import sys
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from core.repair import DEFAULT_CODE_FIELDS
from core.stage_defs import STAGES
from server.routers import parse

load_dotenv()

# =============================================================================
# CONFIGURATION
# =============================================================================

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def create_app() -> FastAPI:
    logger.remove()
    logger.add(sys.stderr, level=LOG_LEVEL)

    app = FastAPI(title="LLM JSON Repair", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(parse.router, prefix="/api", tags=["parse"])

    @app.get("/api/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "stages": [s.name for s in STAGES],
            "neutralized_fields": list(DEFAULT_CODE_FIELDS),
        }

    logger.info(f"API ready with stages: {', '.join(s.name for s in STAGES)}")
    return app


app = create_app()
