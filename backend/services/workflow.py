# backend/services/workflow.py
"""Job lifecycle: creation, funnel transitions and field edits.

`change_status` is the only code path that moves a job through the funnel,
and it is the only place the public status of a job and of its parent
manufacturing record is written after creation. The job, the record and the
status_change event are committed together or not at all.
"""
import logging
from contextlib import contextmanager
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models.manufacturer_job import ManufacturerJob
from models.manufacturing import ManufacturingRecord
from services.event_log import append_event
from services.status_catalog import FUNNEL_ORDER, label_for, public_status_for, validate_transition
from services.tenant_scope import Actor, get_job_for_actor, require_portal_actor, require_staff
from utils.exceptions import ConflictError, ForbiddenError, NotFoundError, RequestValidationFailed

logger = logging.getLogger(__name__)

INITIAL_STATUS = FUNNEL_ORDER[0]

DATE_FIELDS = ("required_delivery_date", "promised_ship_date", "event_date", "latest_arrival_date")
SPEC_FIELDS = (
    "sample_required", "fabric_type", "print_method", "special_instructions", "internal_notes", "priority",
)
EDITABLE_FIELDS = DATE_FIELDS + SPEC_FIELDS
REQUIRED_FIELDS = ("sample_required", "priority")


@contextmanager
def _detect_concurrent_write(db: Session, job_id: int):
    """Turn a version mismatch on flush or commit into a ConflictError, discarding the changes."""
    try:
        yield
    except StaleDataError:
        db.rollback()
        logger.warning("Concurrent modification of job %s, changes discarded", job_id)
        raise ConflictError("Job was modified by another request, reload and retry", {"jobId": job_id})


def _as_text(value) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _propagate_public_status(record: Optional[ManufacturingRecord], job: ManufacturerJob):
    """Copy the job's public status onto its manufacturing record."""
    if record is None:
        logger.warning(
            "Manufacturing record %s for job %s not found, public status not propagated",
            job.manufacturing_id, job.id,
        )
    elif record.status != job.public_status:
        record.status = job.public_status


def change_status(
    db: Session,
    job_id: int,
    requested_status: str,
    notes: Optional[str],
    actor: Actor,
    expected_version: Optional[int] = None,
) -> ManufacturerJob:
    job = get_job_for_actor(db, job_id, actor)
    if expected_version is not None and expected_version != job.version:
        raise ConflictError(
            "Job was modified by another request, reload and retry",
            {"jobId": job.id, "expectedVersion": expected_version, "currentVersion": job.version},
        )

    previous_status = job.manufacturer_status
    validate_transition(previous_status, requested_status)
    public_status = public_status_for(requested_status)

    with _detect_concurrent_write(db, job.id):
        if requested_status != previous_status:
            job.manufacturer_status = requested_status
            job.public_status = public_status

            record = (
                db.query(ManufacturingRecord)
                .filter(ManufacturingRecord.id == job.manufacturing_id)
                .first()
            )
            _propagate_public_status(record, job)

        append_event(
            db,
            job.id,
            "status_change",
            f"Status changed to {label_for(requested_status)}",
            actor,
            description=notes,
            previous_value=previous_status,
            new_value=requested_status,
            metadata={"publicStatus": public_status},
        )
        db.commit()
    db.refresh(job)

    logger.info("Job %s moved %s -> %s by user %s", job.id, previous_status, requested_status, actor.user_id)
    return job


def _build_job(record: ManufacturingRecord, manufacturer_id: Optional[int], fields: dict) -> ManufacturerJob:
    job = ManufacturerJob(
        manufacturing_id=record.id,
        order_id=record.order_id,
        manufacturer_id=manufacturer_id,
        manufacturer_status=INITIAL_STATUS,
        public_status=public_status_for(INITIAL_STATUS),
        priority=fields.pop("priority", None) or record.priority or "normal",
        special_instructions=fields.pop("special_instructions", None) or record.special_instructions,
    )
    for key, value in fields.items():
        setattr(job, key, value)
    return job


def _log_job_created(db: Session, job: ManufacturerJob, actor: Actor, description: str):
    append_event(
        db,
        job.id,
        "status_change",
        "Job Created",
        actor,
        description=description,
        new_value=INITIAL_STATUS,
        metadata={"publicStatus": job.public_status},
    )


def create_job(db: Session, data: dict, actor: Actor) -> ManufacturerJob:
    """Create the portal job for a manufacturing record.

    `data` carries manufacturing_id, order_id and optionally manufacturer_id
    plus any of the editable job fields.
    """
    require_portal_actor(actor)
    fields = dict(data)
    manufacturing_id = fields.pop("manufacturing_id")
    order_id = fields.pop("order_id")
    requested_manufacturer = fields.pop("manufacturer_id", None)

    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise RequestValidationFailed("Unknown job fields", {"fields": sorted(unknown)})
    for field in REQUIRED_FIELDS:
        if field in fields and fields[field] is None:
            del fields[field]

    record = db.query(ManufacturingRecord).filter(ManufacturingRecord.id == manufacturing_id).first()
    if record is None:
        raise NotFoundError("Manufacturing record not found", {"manufacturingId": manufacturing_id})
    if record.order_id != order_id:
        raise RequestValidationFailed(
            "orderId does not match the manufacturing record",
            {"orderId": order_id, "recordOrderId": record.order_id},
        )

    if actor.is_manufacturer:
        if requested_manufacturer is not None and requested_manufacturer != actor.manufacturer_id:
            raise ForbiddenError("Cannot create jobs for another manufacturer")
        if record.manufacturer_id != actor.manufacturer_id:
            raise ForbiddenError("Manufacturing record is not assigned to your manufacturer")
        manufacturer_id = actor.manufacturer_id
    else:
        manufacturer_id = requested_manufacturer if requested_manufacturer is not None else record.manufacturer_id

    existing = db.query(ManufacturerJob.id).filter(ManufacturerJob.manufacturing_id == record.id).first()
    if existing is not None:
        raise ConflictError("A job already exists for this manufacturing record",
                            {"manufacturingId": record.id, "jobId": existing.id})

    job = _build_job(record, manufacturer_id, fields)
    db.add(job)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("A job already exists for this manufacturing record", {"manufacturingId": record.id})

    _propagate_public_status(record, job)
    _log_job_created(db, job, actor, f"Manufacturer job created for order {record.order_id}")
    db.commit()
    db.refresh(job)
    logger.info("Job %s created for manufacturing record %s by user %s", job.id, record.id, actor.user_id)
    return job


def update_job_fields(db: Session, job_id: int, changes: dict, actor: Actor) -> ManufacturerJob:
    """Edit dates and spec fields. Status is not editable here."""
    job = get_job_for_actor(db, job_id, actor)

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise RequestValidationFailed("Fields cannot be edited", {"fields": sorted(unknown)})
    cleared = sorted(f for f in REQUIRED_FIELDS if f in changes and changes[f] is None)
    if cleared:
        raise RequestValidationFailed("Fields cannot be cleared", {"fields": cleared})

    date_changes = {}
    spec_changes = {}
    for field, value in changes.items():
        old = getattr(job, field)
        if old == value:
            continue
        diff = {"old": _as_text(old), "new": _as_text(value)}
        if field in DATE_FIELDS:
            date_changes[field] = diff
        else:
            spec_changes[field] = diff
        setattr(job, field, value)

    with _detect_concurrent_write(db, job.id):
        if date_changes:
            append_event(
                db, job.id, "deadline_changed", "Dates updated", actor,
                description=", ".join(sorted(date_changes)),
                metadata={"changes": date_changes},
            )
        if spec_changes:
            append_event(
                db, job.id, "spec_update", "Specifications updated", actor,
                description=", ".join(sorted(spec_changes)),
                metadata={"changes": spec_changes},
            )
        db.commit()
    db.refresh(job)
    if date_changes or spec_changes:
        logger.info("Job %s fields updated by user %s: %s", job.id, actor.user_id,
                    sorted(list(date_changes) + list(spec_changes)))
    return job


def sync_jobs(db: Session, actor: Actor) -> int:
    """Create the missing job for every active manufacturing record."""
    require_staff(actor)

    records = (
        db.query(ManufacturingRecord)
        .outerjoin(ManufacturerJob, ManufacturerJob.manufacturing_id == ManufacturingRecord.id)
        .filter(ManufacturingRecord.archived.is_(False), ManufacturerJob.id.is_(None))
        .order_by(ManufacturingRecord.id)
        .all()
    )

    created = 0
    for record in records:
        job = _build_job(record, record.manufacturer_id, {})
        db.add(job)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            logger.warning("Job sync collided with a concurrent job creation for record %s", record.id)
            raise ConflictError("A job was created for this manufacturing record during sync, retry the sync",
                                {"manufacturingId": record.id})
        _propagate_public_status(record, job)
        _log_job_created(db, job, actor, "Job created by sync")
        created += 1

    db.commit()
    logger.info("Job sync by user %s created %d jobs", actor.user_id, created)
    return created
