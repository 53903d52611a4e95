# backend/models/manufacturer_job.py
from sqlalchemy import Column, Integer, String, Text, Boolean, Date, ForeignKey, DateTime, JSON, func
from sqlalchemy.orm import relationship
from database import Base


# Manufacturer-portal view of a manufacturing record, tracking the fine-grained funnel status
class ManufacturerJob(Base):
    __tablename__ = "manufacturer_jobs"

    id = Column(Integer, primary_key=True, index=True)
    manufacturing_id = Column(Integer, ForeignKey("manufacturing.id", ondelete="CASCADE"),
                              nullable=False, unique=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=True, index=True)

    manufacturer_status = Column(String, nullable=False, default="intake_pending", index=True)
    public_status = Column(String, nullable=False, default="awaiting_admin_confirmation", index=True)

    required_delivery_date = Column(Date, nullable=True)
    promised_ship_date = Column(Date, nullable=True)
    event_date = Column(Date, nullable=True)
    latest_arrival_date = Column(Date, nullable=True)

    sample_required = Column(Boolean, default=False, nullable=False)
    fabric_type = Column(String, nullable=True)
    print_method = Column(String, nullable=True)
    special_instructions = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)
    priority = Column(String, nullable=False, default="normal")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    version = Column(Integer, nullable=False, default=1)

    manufacturing = relationship("ManufacturingRecord", back_populates="job")
    order = relationship("Order")
    manufacturer = relationship("Manufacturer")
    events = relationship("ManufacturerEvent", back_populates="job", cascade="all, delete-orphan",
                          order_by="ManufacturerEvent.id.desc()")

    __mapper_args__ = {"version_id_col": version}


# Append-only audit entry for a manufacturer job
class ManufacturerEvent(Base):
    __tablename__ = "manufacturer_events"

    id = Column(Integer, primary_key=True, index=True)
    manufacturer_job_id = Column(Integer, ForeignKey("manufacturer_jobs.id", ondelete="CASCADE"),
                                 nullable=False, index=True)
    event_type = Column(String(50), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    previous_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    job = relationship("ManufacturerJob", back_populates="events")
