"""API routes for company enrichment."""

import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, BackgroundTasks
from pydantic import BaseModel, Field

from company_enricher.connectors import SqlCompanyStore
from company_enricher.models import ExtractedFields
from company_enricher.models.database import DBEnrichmentRun, get_session
from company_enricher.pipeline import EnrichmentOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


class EnrichRequest(BaseModel):
    """Request body for a single-company preview."""
    name: str = Field(min_length=1)
    existing_fields: dict[str, Any] = Field(default_factory=dict)


class EnrichResponse(BaseModel):
    """Preview outcome for a single company."""
    name: str
    found: bool
    wikipedia_title: Optional[str] = None
    wikipedia_url: Optional[str] = None
    score: Optional[float] = None
    confidence: Optional[str] = None
    fields: ExtractedFields = Field(default_factory=dict)
    fields_added: list[str] = Field(default_factory=list)
    reason: Optional[str] = None
    error: Optional[str] = None


class RunRequest(BaseModel):
    """Request body for starting a batch run over the database."""
    update_db: bool = False
    limit: Optional[int] = Field(default=None, ge=1)


class RunResponse(BaseModel):
    """Response for run submission."""
    run_id: str
    status: str
    message: str


class RunStatusResponse(BaseModel):
    """Response for run status."""
    run_id: str
    status: str
    update_db: bool
    total: int
    found: int
    updated: int
    error_message: Optional[str] = None


# In-memory storage for active runs
active_runs: dict[str, dict] = {}


def create_orchestrator() -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator()


def create_store() -> SqlCompanyStore:
    return SqlCompanyStore()


@router.post("/enrich", response_model=EnrichResponse)
async def enrich_company(request: EnrichRequest):
    """Preview enrichment of one company; nothing is written."""
    async with create_orchestrator() as orchestrator:
        result = await orchestrator.enrich_name(request.name, request.existing_fields)

    return EnrichResponse(
        name=result.company_name,
        found=result.found,
        wikipedia_title=result.match.title if result.match else None,
        wikipedia_url=result.wikipedia_url,
        score=result.match.score if result.match else None,
        confidence=result.match.confidence.value if result.match else None,
        fields=result.fields,
        fields_added=result.fields_added,
        reason=result.reason,
        error=result.error,
    )


@router.post("/runs", response_model=RunResponse)
async def start_run(request: RunRequest, background_tasks: BackgroundTasks):
    """Start a batch enrichment run over the company database."""
    run_id = str(uuid.uuid4())

    # Store run in database
    session = get_session()
    run = DBEnrichmentRun(
        run_id=run_id,
        status="pending",
        update_db=int(request.update_db),
        started_at=datetime.utcnow(),
    )
    session.add(run)
    session.commit()
    session.close()

    # Store in memory for progress tracking
    active_runs[run_id] = {
        "status": "pending",
        "update_db": request.update_db,
        "limit": request.limit,
    }

    # Run enrichment in background
    background_tasks.add_task(run_batch, run_id)

    return RunResponse(
        run_id=run_id,
        status="pending",
        message="Enrichment started. Use /runs/{run_id} to check progress.",
    )


@router.get("/runs/{run_id}", response_model=RunStatusResponse)
async def get_run(run_id: str):
    """Get the status of an enrichment run."""
    # Check memory first
    if run_id in active_runs:
        run = active_runs[run_id]
        return RunStatusResponse(
            run_id=run_id,
            status=run["status"],
            update_db=run["update_db"],
            total=run.get("total", 0),
            found=run.get("found", 0),
            updated=run.get("updated", 0),
            error_message=run.get("error"),
        )

    # Check database
    session = get_session()
    run = session.query(DBEnrichmentRun).filter_by(run_id=run_id).first()
    session.close()

    if not run:
        raise HTTPException(status_code=404, detail="Enrichment run not found")

    return RunStatusResponse(
        run_id=run_id,
        status=run.status,
        update_db=bool(run.update_db),
        total=run.total or 0,
        found=run.found or 0,
        updated=run.updated or 0,
        error_message=run.error_message,
    )


async def run_batch(run_id: str):
    """Execute a batch run and record its outcome."""
    run = active_runs.get(run_id)
    if not run:
        return

    try:
        run["status"] = "running"
        _save_run(run_id, status="running")
        logger.info(f"[{run_id}] Starting enrichment...")

        async with create_orchestrator() as orchestrator:
            report = await orchestrator.run(
                create_store(),
                update=run["update_db"],
                limit=run["limit"],
            )

        run.update(
            status="completed",
            total=report.total,
            found=report.found,
            updated=report.updated,
        )
        logger.info(f"[{run_id}] Enriched {report.found}/{report.total} companies")

        _save_run(
            run_id,
            status="completed",
            completed_at=datetime.utcnow(),
            total=report.total,
            found=report.found,
            updated=report.updated,
        )

    except Exception as e:
        logger.error(f"[{run_id}] Enrichment run failed: {e}")
        run["status"] = "failed"
        run["error"] = str(e)
        _save_run(run_id, status="failed", error_message=str(e))


def _save_run(run_id: str, **values):
    """Update the stored run record."""
    session = get_session()
    run = session.query(DBEnrichmentRun).filter_by(run_id=run_id).first()
    if run:
        for key, value in values.items():
            setattr(run, key, value)
        session.commit()
    session.close()
