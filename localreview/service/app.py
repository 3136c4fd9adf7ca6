"""FastAPI application exposing the review operation over HTTP."""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from ..config import ConfigError
from ..errors import ReviewError
from ..orchestrator import ReviewOrchestrator


class ReviewRequest(BaseModel):
    path: str = "."


class HealthResponse(BaseModel):
    status: str


OrchestratorFactory = Callable[[str], ReviewOrchestrator]


def create_app(orchestrator_factory: OrchestratorFactory = ReviewOrchestrator) -> FastAPI:
    """Create the FastAPI application exposing the review operation."""

    app = FastAPI(title="localreview", version="1.0.0")

    async def get_factory() -> OrchestratorFactory:
        return orchestrator_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/review")
    async def review(
        payload: ReviewRequest,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> Response:
        # One orchestrator per request; runs share nothing but the filesystem.
        orchestrator = factory(payload.path)
        output = await orchestrator.review()
        # Reviewer output is relayed untouched.
        return Response(content=output, media_type="application/json")

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ReviewError)
    async def review_error_handler(_: Any, exc: ReviewError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc), "stage": exc.stage})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
