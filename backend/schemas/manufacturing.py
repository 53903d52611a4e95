from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import Field

from schemas.common import CamelInput, CamelModel, OrderSummaryOut

Priority = Literal["low", "normal", "high", "urgent"]


# --- Manufacturing records ---

class ManufacturingCreate(CamelInput):
    order_id: int
    manufacturer_id: Optional[int] = None
    assigned_to: Optional[int] = None
    priority: Priority = "normal"
    special_instructions: Optional[str] = None
    # Notes for the initial update
    notes: Optional[str] = None


class JobSummaryOut(CamelModel):
    id: int
    manufacturer_status: str
    public_status: str


class ManufacturingOut(CamelModel):
    id: int
    order_id: int
    status: str
    manufacturer_id: Optional[int] = None
    assigned_to: Optional[int] = None
    priority: str
    special_instructions: Optional[str] = None
    tracking_number: Optional[str] = None
    archived: bool = False
    archived_at: Optional[datetime] = None
    archived_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int
    order: Optional[OrderSummaryOut] = None
    job: Optional[JobSummaryOut] = None


# --- Manufacturing updates ---

class ManufacturingUpdateCreate(CamelInput):
    manufacturing_id: int
    status: str
    notes: Optional[str] = None
    manufacturer_id: Optional[int] = None
    tracking_number: Optional[str] = None
    estimated_completion: Optional[datetime] = None
    actual_completion_date: Optional[datetime] = None
    progress_percentage: int = Field(default=0, ge=0, le=100)


class UpdateLineItemOut(CamelModel):
    id: int
    manufacturing_update_id: int
    line_item_id: int
    product_name: Optional[str] = None
    variant_code: Optional[str] = None
    variant_color: Optional[str] = None
    image_url: Optional[str] = None
    yxs: int = 0
    ys: int = 0
    ym: int = 0
    yl: int = 0
    xs: int = 0
    s: int = 0
    m: int = 0
    l: int = 0
    xl: int = 0
    xxl: int = 0
    xxxl: int = 0
    xxxxl: int = 0
    mockup_image_url: Optional[str] = None
    mockup_uploaded_at: Optional[datetime] = None
    mockup_uploaded_by: Optional[int] = None
    actual_cost: Optional[float] = None
    sizes_confirmed: bool = False
    sizes_confirmed_at: Optional[datetime] = None
    sizes_confirmed_by: Optional[int] = None
    manufacturer_completed: bool = False
    manufacturer_completed_at: Optional[datetime] = None
    manufacturer_completed_by: Optional[int] = None
    notes: Optional[str] = None
    descriptors: Optional[List[Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ManufacturingUpdateOut(CamelModel):
    id: int
    manufacturing_id: int
    order_id: Optional[int] = None
    status: str
    notes: Optional[str] = None
    updated_by: int
    manufacturer_id: Optional[int] = None
    tracking_number: Optional[str] = None
    estimated_completion: Optional[datetime] = None
    actual_completion_date: Optional[datetime] = None
    progress_percentage: Optional[int] = 0
    created_at: Optional[datetime] = None
    line_items: List[UpdateLineItemOut] = []


class ManufacturingCreatedOut(CamelModel):
    manufacturing: ManufacturingOut
    update: ManufacturingUpdateOut


class RefreshResultOut(CamelModel):
    updated_count: int
    created_count: int


# Workflow fields on a snapshot row. Admin/ops and manufacturers edit disjoint subsets.
class UpdateLineItemPatch(CamelInput):
    mockup_image_url: Optional[str] = None
    actual_cost: Optional[float] = Field(default=None, ge=0)
    sizes_confirmed: Optional[bool] = None
    descriptors: Optional[List[Any]] = None
    manufacturer_completed: Optional[bool] = None
    notes: Optional[str] = None


# --- Manufacturer workspace ---

class AssignedLineItemOut(UpdateLineItemOut):
    manufacturing_id: int
    order_id: int
    order_code: Optional[str] = None
    order_name: Optional[str] = None
    manufacturing_status: Optional[str] = None
    priority: Optional[str] = None


class ManufacturerInfoOut(CamelModel):
    id: int
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    lead_time_days: Optional[int] = None


class ManufacturerWorkspaceOut(CamelModel):
    manufacturer: Optional[ManufacturerInfoOut] = None
    line_items: List[AssignedLineItemOut] = []


class ManufacturerStatsOut(CamelModel):
    total_items: int
    completed_items: int
    pending_items: int
