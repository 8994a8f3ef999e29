"""
Jobs API endpoints.
Handles job posting CRUD, listing with search/filters and the stats overview.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_platform.database import get_db
from hiring_platform.errors import FieldError, ValidationError, NotFoundError
from hiring_platform.services.job_validation import JOB_TYPES, JOB_STATUSES
from hiring_platform.models.user import User, UserRole
from hiring_platform.api.auth import require_roles
from hiring_platform.schemas.job import (
    JobPayload,
    JobEnvelope,
    JobPage,
    JobPageEnvelope,
    JobStats,
    JobStatsEnvelope,
)
from hiring_platform.services.job_query import JobFilters, list_jobs, get_job, MAX_LIMIT
from hiring_platform.services.job_posting import (
    build_job_response,
    create_job_posting,
    update_job_posting,
    delete_job_posting,
)
from hiring_platform.services.job_stats import job_stats_overview

# Configure logger
logger = logging.getLogger(__name__)

router = APIRouter()

can_post_jobs = require_roles(UserRole.ADMIN, UserRole.RECRUITER)


def parse_if_match(if_match: Optional[str]) -> Optional[int]:
    """If-Match carries the version the client last saw, e.g. `3` or `"3"`."""
    if if_match is None:
        return None
    value = if_match.strip().strip('"')
    if value.startswith("W/"):
        value = value[2:].strip('"')
    try:
        return int(value)
    except ValueError:
        raise ValidationError([FieldError("If-Match", "If-Match must be the posting version number")])


def check_choice_filters(**filters: Optional[str]) -> None:
    """Non-empty `type`/`status` filters must name a known value; empty ones are ignored."""
    choices = {"type": JOB_TYPES, "status": JOB_STATUSES}
    errors = [
        FieldError(name, f"{name.capitalize()} must be one of: {', '.join(choices[name])}")
        for name, value in filters.items()
        if value and value not in choices[name]
    ]
    if errors:
        raise ValidationError(errors)


# ============================================================
# ENDPOINTS
# ============================================================

@router.get("/", response_model=JobPageEnvelope)
async def list_job_postings(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(10, ge=1, le=MAX_LIMIT),
    search: Optional[str] = Query(None, description="Full-text search terms"),
    department: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """
    List job postings, newest first.
    Returns paginated results.
    """
    check_choice_filters(type=type, status=status)
    filters = JobFilters(
        page=page,
        limit=limit,
        search=search,
        department=department,
        location=location,
        type=type or None,
        status=status or None,
    )
    result = await list_jobs(db, filters)
    return JobPageEnvelope(data=JobPage(
        documents=[build_job_response(job) for job in result.documents],
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    ))


# Registered before /{job_id} so "stats" is not parsed as an id
@router.get("/stats/overview", response_model=JobStatsEnvelope)
async def job_stats(
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db)
):
    """Posting counts per status, monthly applications and top departments."""
    overview = await job_stats_overview(db)
    return JobStatsEnvelope(data=JobStats(**overview))


@router.get("/{job_id}", response_model=JobEnvelope)
async def get_job_posting(
    job_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Get a specific job posting by ID.
    """
    job = await get_job(db, job_id)
    if not job:
        raise NotFoundError("Job posting not found")
    return JobEnvelope(data=build_job_response(job))


@router.post("/", response_model=JobEnvelope, status_code=201)
async def create_job(
    payload: JobPayload,
    current_user: User = Depends(can_post_jobs),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a new job posting for the caller's company.

    Blank requirement entries are dropped; at least one must remain.
    """
    job = await create_job_posting(payload.model_dump(exclude_unset=True), current_user, db)
    return JobEnvelope(data=build_job_response(job))


@router.put("/{job_id}", response_model=JobEnvelope)
async def update_job(
    job_id: int,
    payload: JobPayload,
    if_match: Optional[str] = Header(None),
    current_user: User = Depends(can_post_jobs),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a job posting (partial update).

    Only the poster or an admin may update. Send `If-Match: <version>` to
    reject the write if someone else changed the posting first.
    """
    job = await update_job_posting(
        job_id,
        payload.model_dump(exclude_unset=True),
        current_user,
        db,
        expected_version=parse_if_match(if_match),
    )
    return JobEnvelope(data=build_job_response(job))


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    current_user: User = Depends(can_post_jobs),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a job posting permanently.

    Only the poster or an admin may delete.
    """
    await delete_job_posting(job_id, current_user, db)
    return {"success": True, "data": {}}
