# backend/services/event_log.py
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from models.manufacturer_job import ManufacturerEvent
from services.status_catalog import EVENT_TYPES
from utils.exceptions import RequestValidationFailed

logger = logging.getLogger(__name__)


# Adds one event to a job's history. Flushes, the caller commits.
def append_event(
    db: Session,
    job_id: int,
    event_type: str,
    title: str,
    actor,
    description: Optional[str] = None,
    previous_value: Optional[str] = None,
    new_value: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> ManufacturerEvent:
    if event_type not in EVENT_TYPES:
        raise RequestValidationFailed(
            f"Unknown event type: {event_type}",
            {"eventType": event_type, "allowed": list(EVENT_TYPES)},
        )
    if not title:
        raise RequestValidationFailed("Event title is required")

    event = ManufacturerEvent(
        manufacturer_job_id=job_id,
        event_type=event_type,
        title=title,
        description=description,
        previous_value=previous_value,
        new_value=new_value,
        meta=metadata,
        created_by=actor.user_id,
    )
    db.add(event)
    db.flush()
    logger.info("Event %s (%s) appended to job %s by user %s", event.id, event_type, job_id, actor.user_id)
    return event


def list_events(db: Session, job_id: int) -> List[ManufacturerEvent]:
    return (
        db.query(ManufacturerEvent)
        .filter(ManufacturerEvent.manufacturer_job_id == job_id)
        .order_by(ManufacturerEvent.created_at.desc(), ManufacturerEvent.id.desc())
        .all()
    )
