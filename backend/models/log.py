from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, func
from sqlalchemy.orm import relationship
from database import Base

# Activity trail for manufacturing records and updates (created, archived,
# line items refreshed, ...). Job-level history lives in ManufacturerEvent.
class Log(Base):
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)

    ts = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(50), index=True)
    resource = Column(String(50), index=True)
    resource_id = Column(Integer, nullable=True, index=True)
    status = Column(String(20), index=True)
    ip = Column(String(64), nullable=True)

    # Before/after values and counters
    meta = Column(JSON, nullable=True)

    user = relationship("User", lazy="joined", uselist=False)
