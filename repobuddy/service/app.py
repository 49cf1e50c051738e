"""FastAPI application entrypoint for repobuddy service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ConfigError
from ..models import FileRecord, Report
from ..orchestrator import Orchestrator


class AnalyzeRequest(BaseModel):
    path: str
    timeout: Optional[float] = None
    max_workers: Optional[int] = None


class FileRequest(BaseModel):
    path: str


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing repobuddy operations."""

    app = FastAPI(title="RepoBuddy Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze_repo(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        def _run() -> Report:
            return orchestrator.build_report(
                payload.path, timeout=payload.timeout, max_workers=payload.max_workers
            )

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)
        return report.to_dict()

    @app.post("/file")
    async def analyze_file(
        payload: FileRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        def _run() -> FileRecord:
            return orchestrator.analyze_file(payload.path)

        loop = asyncio.get_running_loop()
        record = await loop.run_in_executor(None, _run)
        return record.to_dict()

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(PermissionError)
    async def permission_handler(_: Any, exc: PermissionError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
