# backend/routes/manufacturing.py
import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.manufacturing import ManufacturingRecord, ManufacturingUpdate, ManufacturingUpdateLineItem
from models.order import Order
from schemas.manufacturing import (
    ManufacturingCreate, ManufacturingCreatedOut, ManufacturingOut, ManufacturingUpdateCreate,
    ManufacturingUpdateOut, RefreshResultOut, UpdateLineItemOut, UpdateLineItemPatch,
)
from services import snapshots, status_catalog
from services.redaction import RoleRedactingRoute
from services.tenant_scope import (
    Actor, can_access_line_item, get_record_for_actor, require_portal_actor, require_staff,
    scoped_line_items_query, scoped_records_query,
)
from utils.audit import client_ip, write_log
from utils.exceptions import ConflictError, ForbiddenError, NotFoundError, RequestValidationFailed
from utils.tokenJWT import get_actor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Manufacturing"], route_class=RoleRedactingRoute)

# Snapshot workflow columns each side may write
STAFF_LINE_ITEM_FIELDS = {"mockup_image_url", "actual_cost", "sizes_confirmed", "descriptors"}
MANUFACTURER_LINE_ITEM_FIELDS = {"manufacturer_completed", "notes"}


def _get_update(db: Session, update_id: int) -> ManufacturingUpdate:
    update = db.query(ManufacturingUpdate).filter(ManufacturingUpdate.id == update_id).first()
    if update is None:
        raise NotFoundError("Manufacturing update not found", {"manufacturingUpdateId": update_id})
    return update


def _update_out(db: Session, update: ManufacturingUpdate, actor: Actor) -> ManufacturingUpdateOut:
    out = ManufacturingUpdateOut.model_validate(update)
    if not actor.is_staff:
        rows = (
            scoped_line_items_query(db, actor)
            .filter(ManufacturingUpdateLineItem.manufacturing_update_id == update.id)
            .order_by(ManufacturingUpdateLineItem.id)
            .all()
        )
        out.line_items = [UpdateLineItemOut.model_validate(r) for r in rows]
    return out


# ---------- Manufacturing records ----------

@router.get("/manufacturing", response_model=List[ManufacturingOut])
def list_manufacturing(
    include_archived: bool = Query(False, alias="includeArchived"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_portal_actor(actor)
    query = scoped_records_query(db, actor, include_archived)
    return query.order_by(ManufacturingRecord.created_at.desc(), ManufacturingRecord.id.desc()).all()


@router.get("/manufacturing/{manufacturing_id}", response_model=ManufacturingOut)
def get_manufacturing(manufacturing_id: int, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    return get_record_for_actor(db, manufacturing_id, actor)


@router.post("/manufacturing", response_model=ManufacturingCreatedOut, status_code=status.HTTP_201_CREATED)
def create_manufacturing(
    payload: ManufacturingCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_staff(actor)

    order = db.query(Order).filter(Order.id == payload.order_id).first()
    if order is None:
        raise NotFoundError("Order not found", {"orderId": payload.order_id})

    existing = db.query(ManufacturingRecord.id).filter(ManufacturingRecord.order_id == order.id).first()
    if existing is not None:
        raise ConflictError("Order already has a manufacturing record",
                            {"orderId": order.id, "manufacturingId": existing.id})

    record = ManufacturingRecord(
        order_id=order.id,
        status=status_catalog.public_status_for(status_catalog.FUNNEL_ORDER[0]),
        manufacturer_id=payload.manufacturer_id,
        assigned_to=payload.assigned_to,
        priority=payload.priority,
        special_instructions=payload.special_instructions,
    )
    db.add(record)
    db.flush()

    update = ManufacturingUpdate(
        manufacturing_id=record.id,
        order_id=order.id,
        status=record.status,
        notes=payload.notes or "Manufacturing record created",
        updated_by=actor.user_id,
        manufacturer_id=record.manufacturer_id,
    )
    db.add(update)
    db.flush()
    rows = snapshots.create_snapshot(db, update.id, order.id)

    write_log(db, user_id=actor.user_id, action="MANUFACTURING_CREATE", resource="manufacturing",
              resource_id=record.id, ip=client_ip(request),
              meta={"order_id": order.id, "update_id": update.id, "line_items": len(rows)}, commit=False)
    db.commit()
    db.refresh(record)
    db.refresh(update)

    logger.info("Manufacturing record %s created for order %s by user %s", record.id, order.id, actor.user_id)
    return {
        "manufacturing": ManufacturingOut.model_validate(record),
        "update": _update_out(db, update, actor),
    }


def _set_archived(db: Session, request: Request, manufacturing_id: int, actor: Actor, archived: bool):
    require_staff(actor)
    record = get_record_for_actor(db, manufacturing_id, actor)

    record.archived = archived
    record.archived_at = datetime.now(timezone.utc) if archived else None
    record.archived_by = actor.user_id if archived else None

    write_log(db, user_id=actor.user_id, action="MANUFACTURING_ARCHIVE" if archived else "MANUFACTURING_UNARCHIVE",
              resource="manufacturing", resource_id=record.id, ip=client_ip(request), commit=False)
    db.commit()
    db.refresh(record)
    return record


@router.post("/manufacturing/{manufacturing_id}/archive", response_model=ManufacturingOut)
def archive_manufacturing(
    manufacturing_id: int, request: Request, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)
):
    return _set_archived(db, request, manufacturing_id, actor, True)


@router.post("/manufacturing/{manufacturing_id}/unarchive", response_model=ManufacturingOut)
def unarchive_manufacturing(
    manufacturing_id: int, request: Request, db: Session = Depends(get_db), actor: Actor = Depends(get_actor)
):
    return _set_archived(db, request, manufacturing_id, actor, False)


# ---------- Manufacturing updates ----------

@router.get("/manufacturing-updates", response_model=List[ManufacturingUpdateOut])
def list_manufacturing_updates(
    manufacturing_id: int = Query(..., alias="manufacturingId"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    record = get_record_for_actor(db, manufacturing_id, actor)
    updates = (
        db.query(ManufacturingUpdate)
        .filter(ManufacturingUpdate.manufacturing_id == record.id)
        .order_by(ManufacturingUpdate.created_at.desc(), ManufacturingUpdate.id.desc())
        .all()
    )
    return [_update_out(db, u, actor) for u in updates]


@router.post("/manufacturing-updates", response_model=ManufacturingUpdateOut, status_code=status.HTTP_201_CREATED)
def create_manufacturing_update(
    payload: ManufacturingUpdateCreate,
    request: Request,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_staff(actor)
    if not status_catalog.is_public_status(payload.status):
        raise RequestValidationFailed(
            "Invalid manufacturing status",
            {"status": payload.status, "allowed": list(status_catalog.PUBLIC_STATUSES)},
        )

    record = get_record_for_actor(db, payload.manufacturing_id, actor)
    # Once a job exists, the record's status follows the job's funnel status only
    if record.job is not None and payload.status != record.job.public_status:
        raise ConflictError(
            "Status is driven by the manufacturer job; change the job status instead",
            {"status": payload.status, "jobPublicStatus": record.job.public_status, "jobId": record.job.id},
        )

    update = ManufacturingUpdate(
        manufacturing_id=record.id,
        order_id=record.order_id,
        status=payload.status,
        notes=payload.notes,
        updated_by=actor.user_id,
        manufacturer_id=payload.manufacturer_id if payload.manufacturer_id is not None else record.manufacturer_id,
        tracking_number=payload.tracking_number,
        estimated_completion=payload.estimated_completion,
        actual_completion_date=payload.actual_completion_date,
        progress_percentage=payload.progress_percentage,
    )
    db.add(update)
    if record.status != payload.status:
        record.status = payload.status
    if payload.tracking_number:
        record.tracking_number = payload.tracking_number
    db.flush()

    rows = snapshots.create_snapshot(db, update.id, record.order_id)
    write_log(db, user_id=actor.user_id, action="MANUFACTURING_UPDATE_CREATE", resource="manufacturing_updates",
              resource_id=update.id, ip=client_ip(request),
              meta={"manufacturing_id": record.id, "status": payload.status, "line_items": len(rows)},
              commit=False)
    db.commit()
    db.refresh(update)
    return _update_out(db, update, actor)


@router.post("/manufacturing-updates/{update_id}/refresh-line-items", response_model=RefreshResultOut)
def refresh_update_line_items(
    update_id: int,
    request: Request,
    reset_workflow: bool = Query(False, alias="resetWorkflow"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_staff(actor)
    update = _get_update(db, update_id)

    result = snapshots.refresh_snapshot(db, update.id, update.manufacturing.order_id, reset_workflow)
    write_log(db, user_id=actor.user_id, action="LINE_ITEMS_REFRESH", resource="manufacturing_updates",
              resource_id=update.id, ip=client_ip(request),
              meta={"updated": result.updated_count, "created": result.created_count,
                    "reset_workflow": reset_workflow},
              commit=False)
    db.commit()
    return result._asdict()


# ---------- Snapshot line items ----------

@router.get("/manufacturing-update-line-items", response_model=List[UpdateLineItemOut])
def list_update_line_items(
    manufacturing_update_id: int = Query(..., alias="manufacturingUpdateId"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_portal_actor(actor)
    update = _get_update(db, manufacturing_update_id)
    # manufacturers are scoped per line-item assignment, not per record
    return (
        scoped_line_items_query(db, actor)
        .filter(ManufacturingUpdateLineItem.manufacturing_update_id == update.id)
        .order_by(ManufacturingUpdateLineItem.id)
        .all()
    )


def _apply_line_item_changes(row: ManufacturingUpdateLineItem, changes: dict, actor: Actor):
    now = datetime.now(timezone.utc)
    for field, value in changes.items():
        if field in ("sizes_confirmed", "manufacturer_completed"):
            value = bool(value)
            if value != getattr(row, field):
                setattr(row, f"{field}_at", now if value else None)
                setattr(row, f"{field}_by", actor.user_id if value else None)
        elif field == "mockup_image_url" and value != row.mockup_image_url:
            row.mockup_uploaded_at = now if value else None
            row.mockup_uploaded_by = actor.user_id if value else None
        setattr(row, field, value)


@router.put("/manufacturing-update-line-items/{row_id}", response_model=UpdateLineItemOut)
def update_line_item(
    row_id: int,
    payload: UpdateLineItemPatch,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    require_portal_actor(actor)
    row = db.query(ManufacturingUpdateLineItem).filter(ManufacturingUpdateLineItem.id == row_id).first()
    if row is None:
        raise NotFoundError("Line item not found", {"lineItemId": row_id})
    if not can_access_line_item(db, row, actor):
        logger.warning("User %s denied access to snapshot line item %s", actor.user_id, row_id)
        raise ForbiddenError("Line item is not assigned to your manufacturer", {"lineItemId": row_id})

    changes = payload.model_dump(exclude_unset=True)
    writable = STAFF_LINE_ITEM_FIELDS if actor.is_staff else MANUFACTURER_LINE_ITEM_FIELDS
    denied = sorted(set(changes) - writable)
    if denied:
        raise ForbiddenError("Fields cannot be edited by this role", {"fields": denied, "role": actor.role})

    _apply_line_item_changes(row, changes, actor)
    db.commit()
    db.refresh(row)
    return row
