# backend/models/order.py
from sqlalchemy import Column, Integer, String, Float, Text, Date, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Size grid buckets shared by order line items and manufacturing snapshots (youth XS .. adult 4XL)
SIZE_FIELDS = ("yxs", "ys", "ym", "yl", "xs", "s", "m", "l", "xl", "xxl", "xxxl", "xxxxl")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_code = Column(String, unique=True, nullable=False, index=True)
    order_name = Column(String, nullable=False)
    status = Column(String, default="new")
    priority = Column(String, default="normal")
    est_delivery = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Totals are maintained by the finance collaborator
    subtotal = Column(Float, nullable=True)
    tax_amount = Column(Float, nullable=True)
    total = Column(Float, nullable=True)
    invoice_url = Column(String, nullable=True)

    line_items = relationship("OrderLineItem", back_populates="order", cascade="all, delete-orphan",
                              order_by="OrderLineItem.id")


# Live order line item with its size grid. Manufacturing never edits these rows,
# it snapshots them into ManufacturingUpdateLineItem.
class OrderLineItem(Base):
    __tablename__ = "order_line_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    variant_id = Column(Integer, ForeignKey("product_variants.id"), nullable=True)
    item_name = Column(String, nullable=True)
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

    unit_price = Column(Float, nullable=False, default=0)
    notes = Column(Text, nullable=True)

    order = relationship("Order", back_populates="line_items")
    variant = relationship("ProductVariant")
    manufacturer_assignments = relationship(
        "OrderLineItemManufacturer", back_populates="line_item", cascade="all, delete-orphan"
    )


# Assigns a manufacturer to one line item (not the whole order). Basis of tenant scoping.
class OrderLineItemManufacturer(Base):
    __tablename__ = "order_line_item_manufacturers"

    id = Column(Integer, primary_key=True, index=True)
    line_item_id = Column(Integer, ForeignKey("order_line_items.id", ondelete="CASCADE"), nullable=False, index=True)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=False, index=True)
    lead_time_days = Column(Integer, nullable=True)
    unit_cost = Column(Float, nullable=True)
    status = Column(String, default="pending")  # pending | in_progress | completed
    estimated_completion = Column(DateTime(timezone=True), nullable=True)
    assigned_at = Column(DateTime(timezone=True), server_default=func.now())

    line_item = relationship("OrderLineItem", back_populates="manufacturer_assignments")
    manufacturer = relationship("Manufacturer")
