from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


class Table(Base):
    """Dining table; ``is_available`` is flipped by the capacity allocator only"""
    __tablename__ = "tables"

    table_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=True)
    capacity = Column(Integer, nullable=False, index=True)
    is_available = Column(Boolean, nullable=False, default=True)
    can_be_used = Column(Boolean, nullable=False, default=True)

    bookings = relationship("Booking", back_populates="table")

    @property
    def to_schema(self):
        return {
            "table_id": self.table_id,
            "name": self.name,
            "capacity": self.capacity,
            "is_available": self.is_available,
            "can_be_used": self.can_be_used,
        }
