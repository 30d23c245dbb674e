import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from nourishnote.core.config import settings, validate_config, cors_origins
from nourishnote.core.database import create_all_tables
from nourishnote.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from nourishnote.core.logging import configure_logging
from nourishnote.core.middleware.request_id import RequestIdMiddleware
from nourishnote.api import chat, entries, health, profile, streaks

configure_logging(settings.ENV)
validate_config(strict=settings.CONFIG_STRICT)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("nourishnote")
    logger.info("Starting NourishNote backend...")
    create_all_tables()
    try:
        yield
    finally:
        logger.info("Stopping NourishNote backend...")


app = FastAPI(title="NourishNote - Backend", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(entries.router)
app.include_router(streaks.router, tags=["streaks"])
app.include_router(profile.router)
app.include_router(chat.router)
app.include_router(health.root_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("nourishnote.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
