# backend/routes/logs.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional, Any
from datetime import datetime

from database import get_db
from models.log import Log
from schemas.common import CamelModel
from services.redaction import RoleRedactingRoute
from services.tenant_scope import Actor, STAFF_ROLES
from utils.tokenJWT import role_required

router = APIRouter(prefix="/logs", tags=["Logs"], route_class=RoleRedactingRoute)

# --- SCHEMAS ---
class LogResponse(CamelModel):
    id: int
    user_id: Optional[int] = None
    action: str
    resource: str
    resource_id: Optional[int] = None
    status: str
    ip: Optional[str] = None
    ts: datetime
    meta: Optional[Any] = None

class LogPage(CamelModel):
    items: List[LogResponse]
    total: int
    page: int
    page_size: int

# --- ENDPOINT ---
@router.get("", response_model=LogPage)
def get_logs(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    action: Optional[str] = Query(None, description="Filter by action"),
    user_id: Optional[int] = Query(None, alias="userId", description="Filter by user id"),
    resource: Optional[str] = Query(None, description="Filter by resource"),
    resource_id: Optional[int] = Query(None, alias="resourceId", description="Filter by resource id"),
    status: Optional[str] = Query(None, description="Filter by status (SUCCESS/FAIL)"),
    date_from: Optional[str] = Query(None, alias="dateFrom", description="From date (YYYY-MM-DD)"),
    date_to: Optional[str] = Query(None, alias="dateTo", description="To date (YYYY-MM-DD)"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(role_required(*STAFF_ROLES)),
):
    query = db.query(Log)

    if action:
        query = query.filter(Log.action.ilike(f"%{action}%"))

    if user_id is not None:
        query = query.filter(Log.user_id == user_id)

    if resource:
        query = query.filter(Log.resource.ilike(f"%{resource}%"))

    if resource_id is not None:
        query = query.filter(Log.resource_id == resource_id)

    if status:
        query = query.filter(Log.status == status)

    if date_from:
        try:
            dt_from = datetime.fromisoformat(date_from)
            query = query.filter(Log.ts >= dt_from)
        except ValueError:
            pass  # bad format, filter ignored

    if date_to:
        try:
            # Whole end day
            dt_to_str = date_to
            if len(dt_to_str) == 10:
                dt_to_str += " 23:59:59"

            dt_to = datetime.fromisoformat(dt_to_str)
            query = query.filter(Log.ts <= dt_to)
        except ValueError:
            pass

    # Newest first
    query = query.order_by(Log.ts.desc(), Log.id.desc())

    total = query.count()
    logs = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": logs,
        "total": total,
        "page": page,
        "page_size": page_size,
    }
