"""Job posting business logic: create, update, delete and response building."""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from hiring_platform.errors import (
    FieldError,
    ValidationError,
    NotFoundError,
    AuthorizationError,
    ConflictError,
)
from hiring_platform.models.job_posting import JobPosting
from hiring_platform.models.user import User
from hiring_platform.schemas.job import JobResponse, PostedBySummary, CompanySummary
from hiring_platform.services.job_query import get_job
from hiring_platform.services.job_validation import validate_job_payload

logger = logging.getLogger(__name__)


def build_job_response(job: JobPosting) -> JobResponse:
    """Build JobResponse from a JobPosting loaded with its owner and company."""
    posted_by = job.posted_by
    company = job.company
    return JobResponse(
        id=job.id,
        title=job.title,
        department=job.department,
        location=job.location,
        type=job.type.value,
        status=job.status.value,
        description=job.description,
        salary=job.salary,
        experience=job.experience,
        requirements=job.requirements or [],
        applications=job.applications,
        version=job.version,
        posted_by=PostedBySummary(
            id=posted_by.id, name=posted_by.name, email=posted_by.email
        ) if posted_by else None,
        company=CompanySummary(
            id=company.id, name=company.name, logo=company.logo
        ) if company else None,
        created_at=job.created_at,
        updated_at=job.updated_at,
        posted_date=job.posted_date,
    )


def check_can_modify(job: JobPosting, user: User, action: str) -> None:
    """
    Only the user who posted the job, or an admin, may change or delete it.

    Raises:
        AuthorizationError 403: If user is neither owner nor admin
    """
    if job.is_owned_by(user) or user.is_admin():
        return
    logger.warning(f"User {user.email} (role={user.role.value}) denied {action} on job {job.id}")
    raise AuthorizationError(f"Not authorized to {action} this job posting")


async def create_job_posting(data: Dict[str, Any], user: User, db: AsyncSession) -> JobPosting:
    cleaned, errors = validate_job_payload(data)
    if not user.company_id:
        errors.append(FieldError("company", "Your account is not associated with a company"))
    if errors:
        raise ValidationError(errors)

    job = JobPosting(
        **cleaned,
        posted_by_id=user.id,
        company_id=user.company_id,
    )
    db.add(job)
    await db.commit()

    logger.info(f"Created job {job.id}: {job.title} ({job.department}) by {user.email}")
    return await get_job(db, job.id)


async def update_job_posting(
    job_id: int,
    data: Dict[str, Any],
    user: User,
    db: AsyncSession,
    expected_version: Optional[int] = None,
) -> JobPosting:
    """
    Partially update a posting: only keys present in `data` are touched.

    Raises:
        NotFoundError 404, AuthorizationError 403, ValidationError 400,
        ConflictError 409 when `expected_version` is stale or another write won the race
    """
    job = await get_job(db, job_id, populate=False)
    if not job:
        raise NotFoundError("Job posting not found")

    check_can_modify(job, user, "update")

    if expected_version is not None and expected_version != job.version:
        raise ConflictError(
            f"Job posting has changed (version {job.version}, expected {expected_version})"
        )

    cleaned, errors = validate_job_payload(data, partial=True)
    if errors:
        raise ValidationError(errors)

    for field, value in cleaned.items():
        setattr(job, field, value)

    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"Concurrent update detected on job {job_id}")
        raise ConflictError()

    logger.info(f"Updated job {job_id} fields={sorted(cleaned)} by {user.email}")
    db.expire(job)
    return await get_job(db, job_id)


async def delete_job_posting(job_id: int, user: User, db: AsyncSession) -> None:
    job = await get_job(db, job_id, populate=False)
    if not job:
        raise NotFoundError("Job posting not found")

    check_can_modify(job, user, "delete")

    await db.delete(job)
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        raise ConflictError()

    logger.info(f"Deleted job {job_id} by {user.email}")
