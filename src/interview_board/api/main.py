"""FastAPI application entry point for the Interview Board API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interview_board import config
from interview_board.api.routes import auth, experiences, health, saved

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from interview_board.data.db import init_db

    init_db()
    yield


app = FastAPI(
    title="Interview Board API",
    description="API for sharing, browsing and ranking job-interview experiences",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": <message>}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _invalid_field_name(loc: tuple) -> str:
    # ("body", "title") -> "title"; a missing body reports as ("body",)
    if not loc:
        return "request"
    return ".".join(str(part) for part in loc[1:]) or str(loc[0])


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render schema validation failures as 400 naming every invalid field."""
    fields = dict.fromkeys(_invalid_field_name(tuple(err.get("loc", ()))) for err in exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid fields: {', '.join(fields)}"},
    )


app.include_router(health.router)
app.include_router(auth.router, prefix="/api")
app.include_router(experiences.router, prefix="/api")
app.include_router(saved.router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "interview_board.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
