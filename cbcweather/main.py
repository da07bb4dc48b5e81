from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from cbcweather.api import api_router
from cbcweather.api.dependencies import get_circle_index
from cbcweather.config import settings
from cbcweather.db import init_db

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("cbcweather")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and load the circle dataset before serving."""

    init_db()
    logger.info("Database initialized")

    index = get_circle_index()
    logger.info("Circle index ready with %s circles", len(index))

    yield


app = FastAPI(title="CBC Weather Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["GET", "PUT", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    return {"message": "CBC Weather backend is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cbcweather.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
