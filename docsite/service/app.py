"""FastAPI application entrypoint for docsite service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError
from ..loader import DocletLoadError
from ..orchestrator import Orchestrator, PublishResult
from ..pages import DuplicatePageError


class PublishRequest(BaseModel):
    doclets_path: str
    config_path: Optional[str] = None
    tutorials_path: Optional[str] = None
    readme_path: Optional[str] = None
    destination: Optional[str] = None


class PublishResponse(BaseModel):
    status: str
    outdir: str
    pages: List[str]
    static_files: int


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing the publish operation."""

    app = FastAPI(title="Docsite Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # One orchestrator per request, so runs never share state.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/publish", response_model=PublishResponse)
    async def publish_site(
        payload: PublishRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> PublishResponse:
        def _run_build() -> PublishResult:
            return orchestrator.run_build(
                payload.doclets_path,
                payload.config_path,
                destination=payload.destination,
                tutorials_path=payload.tutorials_path,
                readme_path=payload.readme_path,
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_build)
        return PublishResponse(
            status="ok",
            outdir=str(result.outdir),
            pages=[str(page.relative_to(result.outdir)) for page in result.pages],
            static_files=len(result.static_files),
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    @app.exception_handler(DocletLoadError)
    @app.exception_handler(DuplicatePageError)
    async def bad_request_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
