"""Job postings router (managers) plus the public careers listing."""

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from desktown.core.deps import get_db, require_csrf_header, require_roles
from desktown.db.enums import MANAGER_ROLES, JobPostingStatus
from desktown.schemas.auth import UserSession
from desktown.schemas.job import (
    JobPostingCreate,
    JobPostingRead,
    JobPostingUpdate,
    PublicJobPostingRead,
)
from desktown.services import job_service

router = APIRouter()


def _get_job_or_404(db: Session, job_id: int):
    job = job_service.get_job(db, job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job posting not found")
    return job


@router.get("/public/jobs", response_model=list[PublicJobPostingRead])
def list_public_jobs(db: Session = Depends(get_db)):
    """Open postings only. No auth."""
    return job_service.list_open_jobs(db)


@router.get("/jobs", response_model=list[JobPostingRead])
def list_jobs(
    status: JobPostingStatus | None = None,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return job_service.list_jobs(db, status=status.value if status else None)


@router.get("/jobs/{job_id}", response_model=JobPostingRead)
def get_job(
    job_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return _get_job_or_404(db, job_id)


@router.post(
    "/jobs",
    response_model=JobPostingRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
def create_job(
    data: JobPostingCreate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    return job_service.create_job(db, session.user_id, data)


@router.patch(
    "/jobs/{job_id}",
    response_model=JobPostingRead,
    dependencies=[Depends(require_csrf_header)],
)
def update_job(
    job_id: int,
    data: JobPostingUpdate,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    job = _get_job_or_404(db, job_id)
    return job_service.update_job(db, job, data)


@router.delete("/jobs/{job_id}", status_code=204, dependencies=[Depends(require_csrf_header)])
def delete_job(
    job_id: int,
    session: UserSession = Depends(require_roles(MANAGER_ROLES)),
    db: Session = Depends(get_db),
):
    job = _get_job_or_404(db, job_id)
    job_service.delete_job(db, job)
    return Response(status_code=204)
