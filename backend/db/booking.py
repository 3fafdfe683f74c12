from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base


class Booking(Base):
    __tablename__ = "bookings"

    booking_id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    table_id = Column(Integer, ForeignKey("tables.table_id", ondelete="RESTRICT"), nullable=False, index=True)
    time = Column(DateTime, nullable=False, index=True)
    clients_nb = Column(Integer, nullable=False)

    # Lifecycle flags: reserved -> seated -> pay enabled -> finished/paid
    is_client_on_place = Column(Boolean, nullable=False, default=False)
    can_client_pay = Column(Boolean, nullable=False, default=False)
    is_finished = Column(Boolean, nullable=False, default=False)
    is_paid = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, server_default=func.now())

    table = relationship("Table", back_populates="bookings")
    orders = relationship("Order", back_populates="booking", passive_deletes=True)

    @property
    def state(self) -> str:
        if self.is_finished or self.is_paid:
            return "paid" if self.is_paid else "finished"
        if self.can_client_pay:
            return "pay_enabled"
        if self.is_client_on_place:
            return "seated"
        return "reserved"

    @property
    def to_schema(self):
        return {
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "table_id": self.table_id,
            "time": self.time,
            "clients_nb": self.clients_nb,
            "is_client_on_place": self.is_client_on_place,
            "can_client_pay": self.can_client_pay,
            "is_finished": self.is_finished,
            "is_paid": self.is_paid,
            "state": self.state,
        }
