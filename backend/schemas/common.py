from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# camelCase on the wire, snake_case accepted on input
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Input models reject unknown keys
class CamelInput(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# Order header shown next to manufacturing data. Totals are stripped for manufacturers.
class OrderSummaryOut(CamelModel):
    id: int
    order_code: str
    order_name: str
    status: Optional[str] = None
    priority: Optional[str] = None
    est_delivery: Optional[date] = None
    created_at: Optional[datetime] = None
    subtotal: Optional[float] = None
    tax_amount: Optional[float] = None
    total: Optional[float] = None
    invoice_url: Optional[str] = None
