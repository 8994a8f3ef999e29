"""
Job listing queries: filtering, full-text search, sorting and pagination.
"""
import logging
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import select, func, or_, and_, cast, literal_column, Text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hiring_platform.models.job_posting import JobPosting, SEARCHABLE_FIELDS, SEARCH_DOCUMENT_SQL

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class JobFilters:
    """Listing parameters as received from the query string."""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None


@dataclass
class JobPageResult:
    documents: List[JobPosting]
    total: int
    page: int
    limit: int
    pages: int


def search_terms(search: Optional[str]) -> List[str]:
    """Split a search string into word terms ('senior python' -> ['senior', 'python'])."""
    if not search:
        return []
    return re.findall(r"\w+", search.lower())


def _search_vector():
    """to_tsvector over every searchable column, identical to the GIN index expression."""
    return func.to_tsvector(literal_column("'english'"), literal_column(SEARCH_DOCUMENT_SQL))


def build_search_clause(terms: List[str], dialect_name: str):
    """
    Full-text predicate matching documents that contain ANY of the terms.

    PostgreSQL uses to_tsvector/to_tsquery (served by the GIN index); other
    dialects fall back to case-insensitive substring matching per column.
    """
    if not terms:
        return None
    if dialect_name == "postgresql":
        tsquery = func.to_tsquery(literal_column("'english'"), " | ".join(terms))
        return _search_vector().op("@@")(tsquery)

    clauses = []
    for term in terms:
        for name in SEARCHABLE_FIELDS:
            # autoescape keeps "_" in word terms from acting as a LIKE wildcard
            clauses.append(cast(getattr(JobPosting, name), Text).icontains(term, autoescape=True))
    return or_(*clauses)


def build_job_filters(filters: JobFilters, dialect_name: str) -> list:
    """Translate listing parameters into SQL clauses. Empty values impose no constraint."""
    clauses = []

    search_clause = build_search_clause(search_terms(filters.search), dialect_name)
    if search_clause is not None:
        clauses.append(search_clause)

    if filters.department:
        clauses.append(JobPosting.department == filters.department)
    if filters.location:
        clauses.append(JobPosting.location == filters.location)
    if filters.type:
        clauses.append(JobPosting.type == filters.type)
    if filters.status:
        clauses.append(JobPosting.status == filters.status)

    return clauses


def with_relations(query):
    """Populate posting owner and company."""
    return query.options(
        selectinload(JobPosting.posted_by),
        selectinload(JobPosting.company),
    )


async def list_jobs(db: AsyncSession, filters: JobFilters) -> JobPageResult:
    """
    Return one page of job postings, newest first.

    Args:
        db: Database session
        filters: Validated listing parameters (page/limit already positive)

    Returns:
        JobPageResult with the documents and pagination counters
    """
    dialect_name = db.get_bind().dialect.name
    clauses = build_job_filters(filters, dialect_name)
    where = and_(*clauses) if clauses else None

    count_query = select(func.count()).select_from(JobPosting)
    query = with_relations(select(JobPosting))
    if where is not None:
        count_query = count_query.where(where)
        query = query.where(where)

    total = (await db.execute(count_query)).scalar_one()

    query = (
        query
        .order_by(JobPosting.created_at.desc(), JobPosting.id.desc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    result = await db.execute(query)
    documents = list(result.scalars().all())

    logger.info(
        f"Listed {len(documents)}/{total} jobs "
        f"(page={filters.page}, limit={filters.limit}, search={filters.search!r})"
    )

    return JobPageResult(
        documents=documents,
        total=total,
        page=filters.page,
        limit=filters.limit,
        pages=math.ceil(total / filters.limit) if total else 0,
    )


async def get_job(db: AsyncSession, job_id: int, populate: bool = True) -> Optional[JobPosting]:
    """Fetch a single posting by id, or None."""
    query = select(JobPosting).where(JobPosting.id == job_id)
    if populate:
        # Refresh instances already in the session (e.g. just created) as well
        query = with_relations(query).execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()
