import logging
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import sentry_sdk

from postboard.config import config
from postboard.entrypoints.errors import register_exception_handlers
from postboard.log_config import configure_logging

from postboard.entrypoints.routers.post import router as post_router
from postboard.entrypoints.routers.user import router as user_router

if config.SENTRY_DSN:
    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        send_default_pii=True,
    )

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Starting postboard")
    yield

app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["HEAD", "GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(post_router)
app.include_router(user_router)

@app.get("/")
async def root():
    return {"message": "Server is running"}
