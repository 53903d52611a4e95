# backend/routes/manufacturer_portal.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from database import get_db
from models.manufacturer_job import ManufacturerJob
from schemas.manufacturer_portal import (
    EventCreate, EventOut, JobCreate, JobDetailOut, JobFieldsPatch, JobOut, JobStatusPatch, SyncJobsOut,
)
from services import event_log, status_catalog, workflow
from services.redaction import RoleRedactingRoute
from services.tenant_scope import Actor, get_job_for_actor, require_portal_actor, scoped_jobs_query
from utils.tokenJWT import get_actor

router = APIRouter(prefix="/manufacturer-portal", tags=["Manufacturer Portal"], route_class=RoleRedactingRoute)


def _job_detail(job: ManufacturerJob) -> JobDetailOut:
    detail = JobDetailOut.model_validate(job)
    detail.allowed_transitions = status_catalog.allowed_transitions(job.manufacturer_status)
    return detail


# Funnel statuses, public statuses and event types for the portal board
@router.get("/config")
def get_config(actor: Actor = Depends(get_actor)):
    return status_catalog.portal_config()


@router.get("/jobs", response_model=List[JobOut])
def list_jobs(
    manufacturer_id: Optional[int] = Query(None, alias="manufacturerId"),
    manufacturer_status: Optional[str] = Query(None, alias="status"),
    public_status: Optional[str] = Query(None, alias="publicStatus"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_portal_actor(actor)

    # manufacturerId is honoured for admin/ops only
    query = scoped_jobs_query(db, actor, manufacturer_id)
    if manufacturer_status:
        query = query.filter(ManufacturerJob.manufacturer_status == manufacturer_status)
    if public_status:
        query = query.filter(ManufacturerJob.public_status == public_status)

    return query.order_by(ManufacturerJob.updated_at.desc(), ManufacturerJob.id.desc()).all()


@router.get("/jobs/{job_id}", response_model=JobDetailOut)
def get_job(job_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    job = get_job_for_actor(db, job_id, actor)
    return _job_detail(job)


@router.post("/jobs", response_model=JobDetailOut, status_code=status.HTTP_201_CREATED)
def create_job(payload: JobCreate, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    job = workflow.create_job(db, payload.model_dump(exclude_unset=True), actor)
    return _job_detail(job)


@router.patch("/jobs/{job_id}/status", response_model=JobDetailOut)
def change_job_status(
    job_id: int,
    payload: JobStatusPatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    job = workflow.change_status(db, job_id, payload.status, payload.notes, actor,
                                 expected_version=payload.version)
    return _job_detail(job)


@router.patch("/jobs/{job_id}", response_model=JobDetailOut)
def update_job(
    job_id: int,
    payload: JobFieldsPatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    job = workflow.update_job_fields(db, job_id, payload.model_dump(exclude_unset=True), actor)
    return _job_detail(job)


@router.get("/jobs/{job_id}/events", response_model=List[EventOut])
def get_job_events(job_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    job = get_job_for_actor(db, job_id, actor)
    return event_log.list_events(db, job.id)


@router.post("/jobs/{job_id}/events", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def add_job_event(
    job_id: int,
    payload: EventCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    job = get_job_for_actor(db, job_id, actor)
    event = event_log.append_event(
        db,
        job.id,
        payload.event_type,
        payload.title,
        actor,
        description=payload.description,
        previous_value=payload.previous_value,
        new_value=payload.new_value,
        metadata=payload.metadata,
    )
    db.commit()
    db.refresh(event)
    return event


@router.post("/sync-jobs", response_model=SyncJobsOut)
def sync_jobs(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return {"created": workflow.sync_jobs(db, actor)}
