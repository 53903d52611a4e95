# backend/models/users.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database import Base

# Represents a user account and its system role (admin, ops, manufacturer, sales, ...)
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    role = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)

    manufacturer_associations = relationship(
        "UserManufacturerAssociation", back_populates="user", cascade="all, delete-orphan"
    )
