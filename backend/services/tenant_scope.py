# backend/services/tenant_scope.py
"""Who may see what.

Admin and ops see everything. A manufacturer sees only work assigned to the
manufacturer organization its user account is associated with; the
organization always comes from the Actor, never from request parameters.
Every check fails closed.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import false, select
from sqlalchemy.orm import Query, Session

from models.manufacturer import UserManufacturerAssociation
from models.manufacturer_job import ManufacturerJob
from models.manufacturing import ManufacturingRecord, ManufacturingUpdateLineItem
from models.order import OrderLineItemManufacturer
from utils.exceptions import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

STAFF_ROLES = {"admin", "ops"}
MANUFACTURER_ROLE = "manufacturer"


def normalize_role(role: Optional[str]) -> str:
    return (role or "").strip().lower()


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str
    manufacturer_id: Optional[int] = None

    @property
    def is_staff(self) -> bool:
        return normalize_role(self.role) in STAFF_ROLES

    @property
    def is_manufacturer(self) -> bool:
        return normalize_role(self.role) == MANUFACTURER_ROLE


def resolve_manufacturer_id(db: Session, user_id: int) -> Optional[int]:
    association = (
        db.query(UserManufacturerAssociation)
        .filter(
            UserManufacturerAssociation.user_id == user_id,
            UserManufacturerAssociation.is_active.is_(True),
        )
        .order_by(UserManufacturerAssociation.created_at, UserManufacturerAssociation.id)
        .first()
    )
    return association.manufacturer_id if association else None


def can_access_job(job: ManufacturerJob, actor: Actor) -> bool:
    if actor.is_staff:
        return True
    if actor.is_manufacturer:
        return actor.manufacturer_id is not None and job.manufacturer_id == actor.manufacturer_id
    return False


def can_access_record(record: ManufacturingRecord, actor: Actor) -> bool:
    if actor.is_staff:
        return True
    if actor.is_manufacturer:
        return actor.manufacturer_id is not None and record.manufacturer_id == actor.manufacturer_id
    return False


def can_access_line_item(db: Session, row: ManufacturingUpdateLineItem, actor: Actor) -> bool:
    if actor.is_staff:
        return True
    if not actor.is_manufacturer or actor.manufacturer_id is None:
        return False
    assignment = (
        db.query(OrderLineItemManufacturer.id)
        .filter(
            OrderLineItemManufacturer.line_item_id == row.line_item_id,
            OrderLineItemManufacturer.manufacturer_id == actor.manufacturer_id,
        )
        .first()
    )
    return assignment is not None


def require_staff(actor: Actor):
    if not actor.is_staff:
        raise ForbiddenError("Only admin or ops users can perform this action")


def require_portal_actor(actor: Actor):
    if not (actor.is_staff or actor.is_manufacturer):
        raise ForbiddenError("Access denied for role", {"role": actor.role})
    if actor.is_manufacturer and actor.manufacturer_id is None:
        raise ForbiddenError("No manufacturer association found for this user")


def get_job_for_actor(db: Session, job_id: int, actor: Actor) -> ManufacturerJob:
    require_portal_actor(actor)
    job = db.query(ManufacturerJob).filter(ManufacturerJob.id == job_id).first()
    if job is None:
        raise NotFoundError("Manufacturer job not found", {"jobId": job_id})
    if not can_access_job(job, actor):
        logger.warning("User %s denied access to job %s", actor.user_id, job_id)
        raise ForbiddenError("Access denied to this job", {"jobId": job_id})
    return job


def get_record_for_actor(db: Session, record_id: int, actor: Actor) -> ManufacturingRecord:
    require_portal_actor(actor)
    record = db.query(ManufacturingRecord).filter(ManufacturingRecord.id == record_id).first()
    if record is None:
        raise NotFoundError("Manufacturing record not found", {"manufacturingId": record_id})
    if not can_access_record(record, actor):
        logger.warning("User %s denied access to manufacturing record %s", actor.user_id, record_id)
        raise ForbiddenError("Access denied to this manufacturing record", {"manufacturingId": record_id})
    return record


def scoped_jobs_query(db: Session, actor: Actor, manufacturer_id: Optional[int] = None) -> Query:
    """Jobs visible to the actor. `manufacturer_id` narrows the list for staff only."""
    query = db.query(ManufacturerJob)
    if actor.is_staff:
        if manufacturer_id is not None:
            query = query.filter(ManufacturerJob.manufacturer_id == manufacturer_id)
        return query
    if actor.is_manufacturer and actor.manufacturer_id is not None:
        return query.filter(ManufacturerJob.manufacturer_id == actor.manufacturer_id)
    return query.filter(false())


def scoped_records_query(db: Session, actor: Actor, include_archived: bool = False) -> Query:
    query = db.query(ManufacturingRecord)
    if not include_archived:
        query = query.filter(ManufacturingRecord.archived.is_(False))
    if actor.is_staff:
        return query
    if actor.is_manufacturer and actor.manufacturer_id is not None:
        return query.filter(ManufacturingRecord.manufacturer_id == actor.manufacturer_id)
    return query.filter(false())


def scoped_line_items_query(db: Session, actor: Actor) -> Query:
    """Snapshot rows visible to the actor; manufacturers see only assigned line items."""
    query = db.query(ManufacturingUpdateLineItem)
    if actor.is_staff:
        return query
    if actor.is_manufacturer and actor.manufacturer_id is not None:
        assigned = (
            select(OrderLineItemManufacturer.line_item_id)
            .where(OrderLineItemManufacturer.manufacturer_id == actor.manufacturer_id)
        )
        return query.filter(ManufacturingUpdateLineItem.line_item_id.in_(assigned))
    return query.filter(false())
