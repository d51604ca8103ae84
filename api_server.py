from __future__ import annotations  # FastAPI server exposing the mock-interview orchestrator

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router as interview_router
from api.schemas import HealthResp
from config import GENERATION_KEY, bind_model, is_bound, load_config
from config.settings import settings
from llm_gateway import http_capability
from observability import configure_logging
from storage.migrate import migrate


logger = logging.getLogger(__name__)

ROOT_PATH = Path(__file__).resolve().parent


def _config_path() -> Path:  # Resolve config path relative to the project root
    path = Path(settings.APP_CONFIG_PATH)
    return path if path.is_absolute() else ROOT_PATH / path


def bind_generation_route() -> bool:
    """Bind the configured chat-completions route as the generation capability."""

    try:
        cfg = load_config(_config_path())
    except FileNotFoundError:
        logger.warning("Generation config not found at %s; generation is unbound", _config_path())
        return False
    except ValueError as exc:
        logger.warning("Failed to load generation config: %s", exc)
        return False
    bind_model(GENERATION_KEY, http_capability(cfg.generation))
    logger.info("Generation route bound: %s (%s)", cfg.generation.name, cfg.generation.model)
    return True


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    migrate(settings.DB_PATH)
    bind_generation_route()
    yield


app = FastAPI(title="Mock Interview API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/api/health", response_model=HealthResp)
def health() -> HealthResp:
    return HealthResp(status="ok", timestamp=datetime.now(timezone.utc), generation_bound=is_bound(GENERATION_KEY))


app.include_router(interview_router)
