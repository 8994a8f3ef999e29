"""Database models"""
from hiring_platform.models.company import Company
from hiring_platform.models.user import User, UserRole
from hiring_platform.models.job_posting import JobPosting, JobType, JobStatus

__all__ = [
    "Company",
    "User",
    "UserRole",
    "JobPosting",
    "JobType",
    "JobStatus",
]
