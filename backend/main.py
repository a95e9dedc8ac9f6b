"""Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from SCHEMA2ERD.utils.logging import setup_logging
from backend.config import settings
from backend.api.routes import erd
from backend.dependencies import get_link_store

# Root logging comes from the `logging` section of SCHEMA2ERD/config/config.yaml
setup_logging(level=settings.log_level)
logging.getLogger("backend").setLevel(logging.DEBUG if settings.debug else logging.INFO)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup banner; expired share links are dropped on shutdown."""
    logger.info(f"BACKEND STARTUP: {settings.api_title} v{settings.api_version}")
    logger.info(f"  Share links: {settings.share_ttl_hours}h TTL, served from {settings.public_base_url}")
    yield
    purged = get_link_store().purge_expired()
    logger.info(f"BACKEND: Shutting down ({purged} expired share link(s) purged)")


app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    lifespan=lifespan
)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One log line per request: method, path, status and elapsed time."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.3f}s)")
        return response


app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(erd.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    # log_config=None keeps the handlers installed by setup_logging above
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None, access_log=False)
