"""FastAPI application entrypoint for docmerge service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import AcquisitionError, RepositoryNotFound
from ..pipeline import AggregationPipeline, AggregationResult
from ..writer import CollectionWriter


class AggregateRequest(BaseModel):
    repos: List[str]
    sections: List[str] = Field(default_factory=list)
    search_root: Optional[str] = None
    clone: bool = False
    workspace: Optional[str] = None
    output: Optional[str] = None
    clean: bool = False


class AggregateResponse(BaseModel):
    status: str
    repositories: int
    documents: int
    sections: Dict[str, int]
    warnings: List[str]
    index: str
    output_path: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> AggregationPipeline:
    return AggregationPipeline()


def create_app(
    pipeline_factory: Callable[[], AggregationPipeline] = _default_pipeline,
    *,
    output_root: Path | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the aggregation pipeline.

    Requests may only write (and clean) directories under ``output_root``;
    without one, the service never touches the filesystem.
    """

    allowed_root = output_root.expanduser().resolve() if output_root is not None else None

    app = FastAPI(title="docmerge Service", version="0.1.0")

    async def get_pipeline() -> AggregationPipeline:
        # Lazy-instantiate per request to keep state predictable.
        return pipeline_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/aggregate", response_model=AggregateResponse)
    async def aggregate(
        payload: AggregateRequest,
        pipeline: AggregationPipeline = Depends(get_pipeline),
    ) -> AggregateResponse:
        target = _output_target(payload.output, allowed_root) if payload.output else None

        def _run() -> AggregationResult:
            return pipeline.run(
                payload.repos,
                sections=payload.sections,
                clone=payload.clone,
                workspace=Path(payload.workspace) if payload.workspace else None,
                search_root=Path(payload.search_root) if payload.search_root else None,
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)

        output_path: Optional[str] = None
        if target is not None:
            await loop.run_in_executor(
                None, lambda: CollectionWriter().write(result, target, clean=payload.clean)
            )
            output_path = str(target)

        return AggregateResponse(
            status="ok" if not result.warnings else "partial",
            repositories=len(result.repositories),
            documents=result.document_count,
            sections=result.section_counts(),
            warnings=result.warnings,
            index=result.index,
            output_path=output_path,
        )

    @app.exception_handler(AcquisitionError)
    async def acquisition_error_handler(
        _: Any, exc: AcquisitionError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RepositoryNotFound)
    async def not_found_handler(
        _: Any, exc: RepositoryNotFound
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def _output_target(output: str, allowed_root: Path | None) -> Path:
    if allowed_root is None:
        raise HTTPException(status_code=403, detail="Writing output is disabled for this service")
    target = (allowed_root / output).resolve()
    if target == allowed_root or not target.is_relative_to(allowed_root):
        raise HTTPException(
            status_code=400, detail=f"output must resolve inside {allowed_root}"
        )
    return target


def run_service(
    host: str = "127.0.0.1", port: int = 8000, output_root: Path | None = None
) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install docmerge[service]`."
        ) from exc

    app = create_app(output_root=output_root)
    uvicorn.run(app, host=host, port=port)
