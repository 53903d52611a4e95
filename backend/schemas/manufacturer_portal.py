from datetime import date, datetime
from typing import Any, List, Literal, Optional

from pydantic import Field

from schemas.common import CamelInput, CamelModel, OrderSummaryOut

PrintMethod = Literal["screen", "plastisol", "water_based", "sublimation", "embroidery", "dtg", "other"]
Priority = Literal["low", "normal", "high", "urgent"]


# Job fields a portal user may set at creation or edit afterwards
class JobFields(CamelInput):
    required_delivery_date: Optional[date] = None
    promised_ship_date: Optional[date] = None
    event_date: Optional[date] = None
    latest_arrival_date: Optional[date] = None
    sample_required: Optional[bool] = None
    fabric_type: Optional[str] = None
    print_method: Optional[PrintMethod] = None
    special_instructions: Optional[str] = None
    internal_notes: Optional[str] = None
    priority: Optional[Priority] = None


class JobCreate(JobFields):
    manufacturing_id: int
    order_id: int
    manufacturer_id: Optional[int] = None


class JobFieldsPatch(JobFields):
    pass


class JobStatusPatch(CamelInput):
    status: str = Field(min_length=1)
    notes: Optional[str] = None
    # Optional optimistic-concurrency check against the job's current version
    version: Optional[int] = None


class EventCreate(CamelInput):
    event_type: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    metadata: Optional[dict] = None


class EventOut(CamelModel):
    id: int
    manufacturer_job_id: int
    event_type: str
    title: str
    description: Optional[str] = None
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    meta: Optional[Any] = Field(default=None, serialization_alias="metadata")
    created_by: int
    created_at: Optional[datetime] = None


class JobOut(CamelModel):
    id: int
    manufacturing_id: int
    order_id: int
    manufacturer_id: Optional[int] = None
    manufacturer_status: str
    public_status: str
    required_delivery_date: Optional[date] = None
    promised_ship_date: Optional[date] = None
    event_date: Optional[date] = None
    latest_arrival_date: Optional[date] = None
    sample_required: bool = False
    fabric_type: Optional[str] = None
    print_method: Optional[str] = None
    special_instructions: Optional[str] = None
    internal_notes: Optional[str] = None
    priority: str = "normal"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int


class JobDetailOut(JobOut):
    order: Optional[OrderSummaryOut] = None
    allowed_transitions: List[str] = []
    events: List[EventOut] = []


class SyncJobsOut(CamelModel):
    created: int
