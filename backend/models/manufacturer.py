# backend/models/manufacturer.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# External manufacturing organization that receives line-item work
class Manufacturer(Base):
    __tablename__ = "manufacturers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    contact_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    lead_time_days = Column(Integer, default=14)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user_associations = relationship("UserManufacturerAssociation", back_populates="manufacturer")


# Links a user account to the manufacturer organization it represents
class UserManufacturerAssociation(Base):
    __tablename__ = "user_manufacturer_associations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="manufacturer_associations")
    manufacturer = relationship("Manufacturer", back_populates="user_associations")
