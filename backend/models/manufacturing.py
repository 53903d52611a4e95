# backend/models/manufacturing.py
from sqlalchemy import (
    Column, Integer, String, Float, Text, Boolean, ForeignKey, DateTime, JSON, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base


# One manufacturing record per order. `status` holds the public status vocabulary.
class ManufacturingRecord(Base):
    __tablename__ = "manufacturing"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, unique=True)
    status = Column(String, nullable=False, default="awaiting_admin_confirmation")
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=True, index=True)
    assigned_to = Column(Integer, ForeignKey("users.id"), nullable=True)
    priority = Column(String, nullable=False, default="normal")
    special_instructions = Column(Text, nullable=True)
    tracking_number = Column(String, nullable=True)

    # Soft delete
    archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    archived_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Optimistic concurrency stamp, bumped by SQLAlchemy on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    order = relationship("Order")
    manufacturer = relationship("Manufacturer")
    updates = relationship("ManufacturingUpdate", back_populates="manufacturing",
                           cascade="all, delete-orphan", order_by="ManufacturingUpdate.id")
    job = relationship("ManufacturerJob", back_populates="manufacturing", uselist=False,
                       cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


# Append-only point-in-time status change or note for a manufacturing record
class ManufacturingUpdate(Base):
    __tablename__ = "manufacturing_updates"

    id = Column(Integer, primary_key=True, index=True)
    manufacturing_id = Column(Integer, ForeignKey("manufacturing.id"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=True)
    status = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=True)
    tracking_number = Column(String, nullable=True)
    estimated_completion = Column(DateTime(timezone=True), nullable=True)
    actual_completion_date = Column(DateTime(timezone=True), nullable=True)
    progress_percentage = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    manufacturing = relationship("ManufacturingRecord", back_populates="updates")
    line_items = relationship("ManufacturingUpdateLineItem", back_populates="update",
                              cascade="all, delete-orphan", order_by="ManufacturingUpdateLineItem.id")


# Frozen copy of an order line item taken when its update was created, plus the
# workflow fields the manufacturer and ops fill in on this copy.
class ManufacturingUpdateLineItem(Base):
    __tablename__ = "manufacturing_update_line_items"
    __table_args__ = (
        UniqueConstraint("manufacturing_update_id", "line_item_id", name="uq_update_line_item"),
    )

    id = Column(Integer, primary_key=True, index=True)
    manufacturing_update_id = Column(Integer, ForeignKey("manufacturing_updates.id", ondelete="CASCADE"),
                                     nullable=False, index=True)
    # Plain reference, not a foreign key: removing the live line item must not remove history
    line_item_id = Column(Integer, nullable=False, index=True)

    # Snapshot fields
    product_name = Column(String, nullable=True)
    variant_code = Column(String, nullable=True)
    variant_color = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    yxs = Column(Integer, default=0)
    ys = Column(Integer, default=0)
    ym = Column(Integer, default=0)
    yl = Column(Integer, default=0)
    xs = Column(Integer, default=0)
    s = Column(Integer, default=0)
    m = Column(Integer, default=0)
    l = Column(Integer, default=0)
    xl = Column(Integer, default=0)
    xxl = Column(Integer, default=0)
    xxxl = Column(Integer, default=0)
    xxxxl = Column(Integer, default=0)

    # Workflow fields
    mockup_image_url = Column(String, nullable=True)
    mockup_uploaded_at = Column(DateTime(timezone=True), nullable=True)
    mockup_uploaded_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    actual_cost = Column(Float, nullable=True)
    sizes_confirmed = Column(Boolean, default=False, nullable=False)
    sizes_confirmed_at = Column(DateTime(timezone=True), nullable=True)
    sizes_confirmed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    manufacturer_completed = Column(Boolean, default=False, nullable=False)
    manufacturer_completed_at = Column(DateTime(timezone=True), nullable=True)
    manufacturer_completed_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    notes = Column(Text, nullable=True)
    descriptors = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    update = relationship("ManufacturingUpdate", back_populates="line_items")
