"""
Field rules for job posting payloads.

Pure functions: nothing here touches the database, so the rules can be
checked (and tested) independently of persistence.
"""
from typing import Any, Dict, List, Tuple

from hiring_platform.errors import FieldError
from hiring_platform.models.job_posting import JobType, JobStatus

REQUIRED_TEXT_FIELDS = ("title", "department", "location", "description")
OPTIONAL_TEXT_FIELDS = ("salary", "experience")

JOB_TYPES = [t.value for t in JobType]
JOB_STATUSES = [s.value for s in JobStatus]


def clean_requirements(requirements: List[Any]) -> List[str]:
    """Trim each requirement and drop the ones left blank."""
    return [r.strip() for r in requirements if isinstance(r, str) and r.strip()]


def validate_job_payload(
    data: Dict[str, Any],
    *,
    partial: bool = False
) -> Tuple[Dict[str, Any], List[FieldError]]:
    """
    Validate and normalise a job posting payload.

    Args:
        data: Fields supplied by the client (only the keys that were sent)
        partial: True for updates - absent fields are skipped instead of
            reported as missing, but fields that are present must still be valid

    Returns:
        (cleaned, errors): cleaned holds trimmed values ready to assign to the
        model; errors is empty when the payload is acceptable
    """
    cleaned: Dict[str, Any] = {}
    errors: List[FieldError] = []

    for field in REQUIRED_TEXT_FIELDS:
        if field not in data and partial:
            continue
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            errors.append(FieldError(field, f"{field.capitalize()} is required"))
            continue
        # Description keeps its formatting, the short fields are trimmed
        cleaned[field] = value if field == "description" else value.strip()

    if "type" in data or not partial:
        job_type = data.get("type")
        if job_type not in JOB_TYPES:
            errors.append(FieldError("type", f"Valid job type is required ({', '.join(JOB_TYPES)})"))
        else:
            cleaned["type"] = JobType(job_type)

    if "status" in data:
        status = data.get("status")
        if status is None and not partial:
            pass  # model default applies
        elif status not in JOB_STATUSES:
            errors.append(FieldError("status", f"Status must be one of: {', '.join(JOB_STATUSES)}"))
        else:
            cleaned["status"] = JobStatus(status)

    for field in OPTIONAL_TEXT_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if value is None:
            cleaned[field] = None
        elif not isinstance(value, str):
            errors.append(FieldError(field, f"{field.capitalize()} must be text"))
        else:
            cleaned[field] = value.strip() or None

    if "requirements" in data or not partial:
        requirements = data.get("requirements")
        if not isinstance(requirements, list) or not all(isinstance(r, str) for r in requirements):
            errors.append(FieldError("requirements", "Requirements must be a list of strings"))
        else:
            requirements = clean_requirements(requirements)
            if not requirements:
                errors.append(FieldError("requirements", "At least one requirement is required"))
            else:
                cleaned["requirements"] = requirements

    return cleaned, errors
