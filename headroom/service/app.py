"""FastAPI application exposing analysis and verb dispatch over HTTP."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .. import __version__
from ..dispatcher import PREVIEW
from ..errors import InvalidJSONError, NotFoundError, ParseError, PolicyError, UnknownVerbError
from ..orchestrator import Orchestrator


class AnalyzeRequest(BaseModel):
    root: str
    deep: bool = False


class DispatchRequest(BaseModel):
    root: str
    target: str
    verb: str
    args: Dict[str, Any] = Field(default_factory=dict)
    mode: str = PREVIEW


class ActionRequest(BaseModel):
    root: str
    dry_run: bool = False


class HealthResponse(BaseModel):
    status: str
    version: str


def _default_orchestrator(root: str) -> Orchestrator:
    return Orchestrator(Path(root))


def create_app(
    orchestrator_factory: Callable[[str], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing headroom operations."""

    app = FastAPI(title="TokenHeadroom Service", version=__version__)

    async def _run_blocking(func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    def get_factory() -> Callable[[str], Orchestrator]:
        # A new orchestrator per request keeps every call on current disk state.
        return orchestrator_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.get("/actions")
    async def list_actions() -> List[str]:
        return Orchestrator.list_actions()

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        factory: Callable[[str], Orchestrator] = Depends(get_factory),
    ) -> Dict[str, Any]:
        def _analyze() -> Dict[str, Any]:
            report = factory(payload.root).analyze()
            return report.to_dict() if payload.deep else report.summary()

        return await _run_blocking(_analyze)

    @app.post("/dispatch")
    async def dispatch(
        payload: DispatchRequest,
        factory: Callable[[str], Orchestrator] = Depends(get_factory),
    ) -> Dict[str, Any]:
        def _dispatch() -> Dict[str, Any]:
            orchestrator = factory(payload.root)
            result = orchestrator.dispatcher.dispatch(
                payload.target, payload.verb, payload.args, mode=payload.mode
            )
            return result.to_dict()

        return await _run_blocking(_dispatch)

    @app.post("/actions/{action_id}")
    async def run_action(
        action_id: str,
        payload: ActionRequest,
        factory: Callable[[str], Orchestrator] = Depends(get_factory),
    ) -> Dict[str, Any]:
        def _run() -> Dict[str, Any]:
            return factory(payload.root).run(action_id, dry_run=payload.dry_run).to_dict()

        return await _run_blocking(_run)

    def _error(status_code: int) -> Callable[[Any, Exception], Any]:
        async def handler(_: Any, exc: Exception) -> JSONResponse:
            return JSONResponse(
                status_code=status_code,
                content={"detail": str(exc), "error": exc.__class__.__name__},
            )

        return handler

    app.add_exception_handler(NotFoundError, _error(404))
    app.add_exception_handler(FileNotFoundError, _error(404))
    app.add_exception_handler(UnknownVerbError, _error(400))
    app.add_exception_handler(ValueError, _error(400))
    app.add_exception_handler(PolicyError, _error(403))
    app.add_exception_handler(InvalidJSONError, _error(422))
    app.add_exception_handler(ParseError, _error(422))

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install tokenheadroom[service]`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
