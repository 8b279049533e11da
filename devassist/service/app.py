"""FastAPI application entrypoint for devassist service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..models import AnalysisResult, QualityFinding
from ..orchestrator import Orchestrator


class AnalyzeRequest(BaseModel):
    path: str
    max_depth: Optional[int] = None
    ignore: List[str] = []
    cache: Optional[bool] = None


class FindingModel(BaseModel):
    rule_id: str
    category: str
    severity: str
    description: str
    file: Optional[str] = None
    line: Optional[int] = None


class AuditResponse(BaseModel):
    score: int
    quality_level: str
    findings: List[FindingModel]
    security: List[FindingModel]
    suggestions: List[str]


class FocusResponse(BaseModel):
    focus_areas: List[str]
    development_phase: str
    technical_debt: str
    priority: List[str]
    quality_level: str
    insights: List[str]


class HealthResponse(BaseModel):
    status: str
    version: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _finding_model(finding: QualityFinding) -> FindingModel:
    return FindingModel(
        rule_id=finding.rule_id,
        category=finding.category,
        severity=finding.severity,
        description=finding.description,
        file=finding.file,
        line=finding.line,
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing devassist operations."""

    app = FastAPI(title="devassist", version=__version__)

    async def get_orchestrator() -> Orchestrator:
        # Fresh orchestrator per request; runs share no state.
        return orchestrator_factory()

    async def _analyze(orchestrator: Orchestrator, payload: AnalyzeRequest) -> AnalysisResult:
        def _run() -> AnalysisResult:
            return orchestrator.run_analysis(
                payload.path,
                max_depth=payload.max_depth,
                ignore=payload.ignore or None,
                cache=payload.cache,
            )

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _run)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/analyze")
    async def analyze(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        result = await _analyze(orchestrator, payload)
        return result.to_dict()

    @app.post("/audit", response_model=AuditResponse)
    async def audit(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AuditResponse:
        result = await _analyze(orchestrator, payload)
        return AuditResponse(
            score=result.quality.score,
            quality_level=result.recommendations.quality_level,
            findings=[_finding_model(finding) for finding in result.quality.findings],
            security=[_finding_model(finding) for finding in result.security],
            suggestions=list(result.quality.suggestions),
        )

    @app.post("/focus", response_model=FocusResponse)
    async def focus(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> FocusResponse:
        result = await _analyze(orchestrator, payload)
        recommendations = result.recommendations
        return FocusResponse(
            focus_areas=list(recommendations.focus_areas),
            development_phase=recommendations.development_phase,
            technical_debt=recommendations.technical_debt,
            priority=list(recommendations.priority),
            quality_level=recommendations.quality_level,
            insights=list(recommendations.insights),
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(PermissionError)
    async def permission_error_handler(_: Any, exc: PermissionError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
