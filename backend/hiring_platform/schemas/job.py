"""Job posting Pydantic schemas."""
from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from hiring_platform.schemas.common import CamelModel


class JobPayload(CamelModel):
    """
    Request body for creating or updating a job posting.
    
    Types are loose here: field rules (required, enum membership,
    blank requirements) are checked by services.job_validation so that every
    problem is reported at once as a field-level 400.
    """
    title: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    description: Optional[str] = None
    salary: Optional[str] = None
    experience: Optional[str] = None
    requirements: Optional[list[Any]] = None


class PostedBySummary(CamelModel):
    id: str
    name: Optional[str] = None
    email: str


class CompanySummary(CamelModel):
    id: str
    name: str
    logo: Optional[str] = None


class JobResponse(CamelModel):
    """Job posting with populated owner and company."""
    id: int
    title: str
    department: str
    location: str
    type: str
    status: str
    description: str
    salary: Optional[str] = None
    experience: Optional[str] = None
    requirements: list[str] = Field(default_factory=list)
    applications: int
    version: int
    posted_by: Optional[PostedBySummary] = None
    company: Optional[CompanySummary] = None
    created_at: datetime
    updated_at: datetime
    posted_date: Optional[str] = None


class JobPage(CamelModel):
    """Paginated envelope contents."""
    documents: list[JobResponse]
    total: int
    page: int
    limit: int
    pages: int


class JobEnvelope(CamelModel):
    success: bool = True
    data: JobResponse


class JobPageEnvelope(CamelModel):
    success: bool = True
    data: JobPage


class StatusCount(CamelModel):
    status: str
    count: int


class MonthlyApplications(CamelModel):
    year: int
    month: int
    applications: int


class DepartmentCount(CamelModel):
    department: str
    count: int


class JobStats(CamelModel):
    total: int
    statuses: list[StatusCount]
    applications_stats: list[MonthlyApplications]
    top_departments: list[DepartmentCount]


class JobStatsEnvelope(CamelModel):
    success: bool = True
    data: JobStats
