from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from jobtrack.core.errors import AppError, ErrorKind
from jobtrack.models.job_application import JobApplication
from jobtrack.schemas.job_application import JobApplicationIn, JobApplicationOut, JobStatus

logger = logging.getLogger(__name__)

STATS_KEYS = ("applied", "interview", "rejected", "offer")


def parse_job_id(raw: str) -> str:
    """Canonical form of a job id, or InvalidInput if it is not a UUID."""
    try:
        return str(uuid.UUID(str(raw).strip()))
    except (TypeError, ValueError):
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid job ID format", errors={"id": "Must be a valid job ID"})


def parse_application_date(raw: str | None) -> datetime | None:
    """
    ISO-8601 date or datetime -> UTC datetime (naive values are taken as UTC).
    None/blank -> None, meaning "not specified".
    """
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise AppError(
            ErrorKind.INVALID_INPUT,
            "Invalid application date format",
            errors={"application_date": "Must be a valid date (YYYY-MM-DD or ISO-8601 datetime)"},
        )
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def normalize_status(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None
    if value not in JobStatus.values():
        allowed = ", ".join(JobStatus.values())
        raise AppError(
            ErrorKind.INVALID_INPUT,
            f"Invalid status. Must be one of: {allowed}",
            errors={"status": f"Must be one of: {allowed}"},
        )
    return value


def validate_job_payload(payload: JobApplicationIn) -> dict[str, Any]:
    """
    Checks the fields shared by create and update and returns cleaned values for
    the fields the client actually sent. Blank optional fields are dropped.
    """
    company = (payload.company or "").strip()
    position = (payload.position or "").strip()
    if not company or not position:
        errors: dict[str, str] = {}
        if not company:
            errors["company"] = "Company is required"
        if not position:
            errors["position"] = "Position is required"
        raise AppError(ErrorKind.INVALID_INPUT, "Company and position are required", errors=errors)

    sent = payload.model_fields_set
    cleaned: dict[str, Any] = {"company": company, "position": position}

    status = normalize_status(payload.status)
    if status is not None:
        cleaned["status"] = status

    application_date = parse_application_date(payload.application_date)
    if application_date is not None:
        cleaned["application_date"] = application_date

    if "notes" in sent:
        cleaned["notes"] = payload.notes

    return cleaned


def get_job_for_user(db: Session, job_id: str, user_id: str) -> JobApplication:
    job = (
        db.query(JobApplication)
        .filter(JobApplication.id == job_id, JobApplication.user_id == user_id)
        .first()
    )
    if not job:
        # Same answer whether the job is missing or owned by someone else.
        raise AppError(ErrorKind.NOT_FOUND, "Job not found")
    return job


def list_jobs_for_user(db: Session, user_id: str) -> list[JobApplication]:
    return (
        db.query(JobApplication)
        .filter(JobApplication.user_id == user_id)
        .order_by(desc(JobApplication.application_date), desc(JobApplication.created_at))
        .all()
    )


def job_stats_for_user(db: Session, user_id: str) -> dict[str, int]:
    """
    Count jobs per status, matching stored statuses case-insensitively.
    Statuses outside the fixed set are not counted anywhere.
    """
    status_key = func.lower(JobApplication.status)
    rows = (
        db.query(status_key, func.count(JobApplication.id))
        .filter(JobApplication.user_id == user_id)
        .group_by(status_key)
        .all()
    )

    stats = {key: 0 for key in STATS_KEYS}
    for key, count in rows:
        if key in stats:
            stats[key] = int(count)
    return stats


def create_job_for_user(db: Session, user_id: str, payload: JobApplicationIn) -> JobApplication:
    data = validate_job_payload(payload)
    data.setdefault("status", JobStatus.APPLIED.value)
    data.setdefault("application_date", datetime.now(timezone.utc))

    job = JobApplication(**data)
    job.user_id = user_id  # ownership always comes from the caller

    db.add(job)
    db.commit()
    db.refresh(job)

    logger.info("Created job id=%s user_id=%s", job.id, user_id)
    return job


def update_job_for_user(db: Session, job_id: str, user_id: str, payload: JobApplicationIn) -> JobApplication:
    data = validate_job_payload(payload)
    job = get_job_for_user(db, parse_job_id(job_id), user_id)

    for k, v in data.items():
        setattr(job, k, v)

    db.commit()
    db.refresh(job)

    logger.info("Updated job id=%s user_id=%s fields=%s", job.id, user_id, sorted(data))
    return job


def delete_job_for_user(db: Session, job_id: str, user_id: str) -> JobApplicationOut:
    job = get_job_for_user(db, parse_job_id(job_id), user_id)
    # Deleted rows expire on commit; keep what the response echoes back.
    snapshot = JobApplicationOut.model_validate(job)

    db.delete(job)
    db.commit()

    logger.info("Deleted job id=%s user_id=%s", snapshot.id, user_id)
    return snapshot
