from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobtrack.core.database import get_db
from jobtrack.dependencies.auth import get_current_user
from jobtrack.models.job_application import JobApplication
from jobtrack.models.user import User
from jobtrack.schemas.job_application import (
    JobApplicationIn,
    JobApplicationOut,
    JobDeletedOut,
    JobStatsOut,
)
from jobtrack.services.jobs import (
    create_job_for_user,
    delete_job_for_user,
    job_stats_for_user,
    list_jobs_for_user,
    update_job_for_user,
)

router = APIRouter(prefix="/jobs", tags=["jobs"], dependencies=[Depends(get_current_user)])


@router.get("/", response_model=list[JobApplicationOut])
def list_jobs(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[JobApplication]:
    return list_jobs_for_user(db, user.id)  # scoped to caller


@router.get("/stats", response_model=JobStatsOut)
def job_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return job_stats_for_user(db, user.id)


@router.post("/", response_model=JobApplicationOut, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobApplicationIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JobApplication:
    return create_job_for_user(db, user.id, payload)


@router.put("/{job_id}", response_model=JobApplicationOut)
def update_job(
    job_id: str,
    payload: JobApplicationIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> JobApplication:
    return update_job_for_user(db, job_id, user.id, payload)


@router.delete("/{job_id}", response_model=JobDeletedOut)
def delete_job(
    job_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    job = delete_job_for_user(db, job_id, user.id)
    return {"message": "Job deleted successfully", "job": job}
