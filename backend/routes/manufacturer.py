# backend/routes/manufacturer.py
from fastapi import APIRouter, Depends
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from database import get_db
from models.manufacturer import Manufacturer
from models.manufacturing import ManufacturingRecord, ManufacturingUpdate, ManufacturingUpdateLineItem
from models.order import Order
from schemas.manufacturing import (
    AssignedLineItemOut, ManufacturerStatsOut, ManufacturerWorkspaceOut, UpdateLineItemOut,
)
from services.tenant_scope import Actor, require_portal_actor, scoped_line_items_query
from services.redaction import RoleRedactingRoute
from utils.exceptions import ForbiddenError
from utils.tokenJWT import get_actor

router = APIRouter(prefix="/manufacturer", tags=["Manufacturer"], route_class=RoleRedactingRoute)


def _require_manufacturer(actor: Actor):
    if not actor.is_manufacturer:
        raise ForbiddenError("Access denied. Manufacturer role required.")
    require_portal_actor(actor)


# Every snapshot row assigned to the caller's manufacturer, with order and record context
@router.get("/line-items", response_model=ManufacturerWorkspaceOut)
def get_assigned_line_items(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    _require_manufacturer(actor)

    manufacturer = db.query(Manufacturer).filter(Manufacturer.id == actor.manufacturer_id).first()
    rows = (
        scoped_line_items_query(db, actor)
        .join(ManufacturingUpdate, ManufacturingUpdate.id == ManufacturingUpdateLineItem.manufacturing_update_id)
        .join(ManufacturingRecord, ManufacturingRecord.id == ManufacturingUpdate.manufacturing_id)
        .join(Order, Order.id == ManufacturingRecord.order_id)
        .add_columns(
            ManufacturingRecord.id.label("manufacturing_id"),
            ManufacturingRecord.status.label("manufacturing_status"),
            ManufacturingRecord.priority,
            Order.id.label("order_id"),
            Order.order_code,
            Order.order_name,
        )
        .filter(ManufacturingRecord.archived.is_(False))
        .order_by(ManufacturingUpdateLineItem.id)
        .all()
    )

    line_items = []
    for row in rows:
        item = row[0]
        data = UpdateLineItemOut.model_validate(item).model_dump()
        data.update(
            manufacturing_id=row.manufacturing_id,
            manufacturing_status=row.manufacturing_status,
            priority=row.priority,
            order_id=row.order_id,
            order_code=row.order_code,
            order_name=row.order_name,
        )
        line_items.append(AssignedLineItemOut(**data))

    return {"manufacturer": manufacturer, "line_items": line_items}


@router.get("/stats", response_model=ManufacturerStatsOut)
def get_stats(db: Session = Depends(get_db), actor: Actor = Depends(get_actor)):
    _require_manufacturer(actor)

    completed = ManufacturingUpdateLineItem.manufacturer_completed.is_(True)
    total, done = (
        scoped_line_items_query(db, actor)
        .with_entities(
            func.count(ManufacturingUpdateLineItem.id),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
        )
        .one()
    )
    return {"total_items": total, "completed_items": done, "pending_items": total - done}
