"""Job posting service."""

from uuid import UUID

from sqlalchemy.orm import Session

from desktown.db.enums import JobPostingStatus
from desktown.db.models import JobPosting


def list_jobs(db: Session, status: str | None = None) -> list[JobPosting]:
    query = db.query(JobPosting)
    if status:
        query = query.filter(JobPosting.status == status)
    return query.order_by(JobPosting.created_at.desc(), JobPosting.id.desc()).all()


def list_open_jobs(db: Session) -> list[JobPosting]:
    return list_jobs(db, status=JobPostingStatus.OPEN.value)


def get_job(db: Session, job_id: int) -> JobPosting | None:
    return db.query(JobPosting).filter(JobPosting.id == job_id).first()


def create_job(db: Session, creator_id: UUID, data) -> JobPosting:
    values = data.model_dump()
    values["status"] = data.status.value
    job = JobPosting(creator_id=creator_id, **values)
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def update_job(db: Session, job: JobPosting, data) -> JobPosting:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("title", "department", "location", "type", "status"):
            continue
        setattr(job, field, getattr(value, "value", value))
    db.commit()
    db.refresh(job)
    return job


def delete_job(db: Session, job: JobPosting) -> None:
    db.delete(job)
    db.commit()
