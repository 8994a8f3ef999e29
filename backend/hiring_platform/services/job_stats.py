"""
Aggregate statistics over job postings for the admin overview.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, func, extract
from sqlalchemy.ext.asyncio import AsyncSession

from hiring_platform.models.job_posting import JobPosting

STATS_WINDOW_MONTHS = 6
TOP_DEPARTMENTS_LIMIT = 5


def months_before(moment: datetime, months: int) -> datetime:
    """Same day-of-month `months` earlier, clamped to the end of shorter months."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    # Clamp e.g. Aug 31 - 6 months -> Feb 28/29
    for day in (moment.day, 30, 29, 28):
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    raise ValueError(f"Cannot shift {moment} back {months} months")


async def status_breakdown(db: AsyncSession) -> Dict[str, Any]:
    """Count postings per status plus the overall total."""
    result = await db.execute(
        select(JobPosting.status, func.count(JobPosting.id))
        .group_by(JobPosting.status)
        .order_by(JobPosting.status)
    )
    statuses = [
        {"status": getattr(status, "value", status), "count": count}
        for status, count in result.all()
    ]
    return {
        "total": sum(s["count"] for s in statuses),
        "statuses": statuses,
    }


async def monthly_applications(
    db: AsyncSession,
    now: Optional[datetime] = None
) -> List[Dict[str, int]]:
    """Sum of `applications` for postings created in the last six months, per calendar month."""
    since = months_before(now or datetime.utcnow(), STATS_WINDOW_MONTHS)
    year = extract("year", JobPosting.created_at)
    month = extract("month", JobPosting.created_at)
    result = await db.execute(
        select(year, month, func.sum(JobPosting.applications))
        .where(JobPosting.created_at >= since)
        .group_by(year, month)
        .order_by(year, month)
    )
    return [
        {"year": int(y), "month": int(m), "applications": int(total or 0)}
        for y, m, total in result.all()
    ]


async def top_departments(db: AsyncSession) -> List[Dict[str, Any]]:
    """The departments with the most postings."""
    count = func.count(JobPosting.id).label("count")
    result = await db.execute(
        select(JobPosting.department, count)
        .group_by(JobPosting.department)
        .order_by(count.desc(), JobPosting.department)
        .limit(TOP_DEPARTMENTS_LIMIT)
    )
    return [{"department": department, "count": n} for department, n in result.all()]


async def job_stats_overview(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Merge the three aggregations into one overview."""
    overview = await status_breakdown(db)
    overview["applications_stats"] = await monthly_applications(db, now)
    overview["top_departments"] = await top_departments(db)
    return overview
