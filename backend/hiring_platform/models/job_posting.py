from datetime import datetime
import enum

from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship

from hiring_platform.database import Base


class JobType(str, enum.Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    TEMPORARY = "temporary"


class JobStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"


# Columns covered by full-text search
SEARCHABLE_FIELDS = ("title", "description", "department", "location", "requirements")

# Text fed to to_tsvector on PostgreSQL. Must match the GIN index expression
# in the initial migration exactly, or the planner will not use the index.
SEARCH_DOCUMENT_SQL = (
    "title || ' ' || description || ' ' || department || ' ' || location "
    "|| ' ' || coalesce(CAST(requirements AS TEXT), '')"
)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class JobPosting(Base):
    __tablename__ = "job_postings"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    
    # Job details
    title = Column(String, nullable=False)
    department = Column(String, nullable=False, index=True)
    location = Column(String, nullable=False, index=True)
    type = Column(
        SQLEnum(JobType, name="job_type", values_callable=_enum_values),
        nullable=False,
        index=True
    )
    status = Column(
        SQLEnum(JobStatus, name="job_status", values_callable=_enum_values),
        nullable=False,
        default=JobStatus.DRAFT,
        index=True
    )
    description = Column(Text, nullable=False)
    salary = Column(String, nullable=True)  # free text, e.g. "$120k - $140k"
    experience = Column(String, nullable=True)  # free text, e.g. "3+ years"
    requirements = Column(JSON, nullable=False, default=list)
    
    # Never incremented: application submission is not implemented
    applications = Column(Integer, nullable=False, default=0)
    
    # Ownership
    posted_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    posted_by = relationship("User", lazy="raise")
    company = relationship("Company", lazy="raise")
    
    # Optimistic concurrency: every UPDATE checks and bumps this
    version = Column(Integer, nullable=False, default=1)
    
    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    __mapper_args__ = {"version_id_col": version}
    
    @property
    def posted_date(self) -> str | None:
        """Human-formatted creation date, e.g. 'July 29, 2025'."""
        if self.created_at is None:
            return None
        return f"{self.created_at:%B} {self.created_at.day}, {self.created_at.year}"
    
    def is_owned_by(self, user) -> bool:
        """Ownership compares identifiers as strings."""
        return str(self.posted_by_id) == str(user.id)
