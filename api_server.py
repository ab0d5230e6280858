from __future__ import annotations  # FastAPI server exposing answer submission and evaluation

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import pipeline_config, router
from config.settings import settings
from pipeline.factory import register_default_providers
from storage.migrate import migrate


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    migrate(settings.DB_PATH)
    # One HTTP client shared by every bound provider, closed on shutdown.
    with httpx.Client() as client:
        register_default_providers(pipeline_config(), settings, client=client)
        logger.info("Answer evaluation API ready db=%s", settings.DB_PATH)
        yield


app = FastAPI(title="Answer Evaluation API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)
