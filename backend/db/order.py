from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from .base import Base


class Order(Base):
    __tablename__ = "orders"

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    # NULL booking means take-away
    booking_id = Column(Integer, ForeignKey("bookings.booking_id", ondelete="SET NULL"), nullable=True, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    additional_infos = Column(Text, nullable=True)
    time = Column(DateTime, nullable=False, server_default=func.now())
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    is_take_away = Column(Boolean, nullable=False, default=False)
    is_finished = Column(Boolean, nullable=False, default=False)

    booking = relationship("Booking", back_populates="orders")
    menus = relationship(
        "OrderMenu",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderMenu.content_id",
        lazy="selectin",
    )

    @property
    def to_schema(self):
        return {
            "order_id": self.order_id,
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "additional_infos": self.additional_infos,
            "time": self.time,
            "total_price": float(self.total_price),
            "is_take_away": self.is_take_away,
            "is_finished": self.is_finished,
            "menu_ids": [m.menu_id for m in self.menus],
        }


class OrderMenu(Base):
    """One row per menu entry of an order (the same menu may appear several times)"""
    __tablename__ = "orders_menus"

    content_id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.order_id", ondelete="CASCADE"), nullable=False, index=True)
    menu_id = Column(Integer, ForeignKey("menus.menu_id", ondelete="RESTRICT"), nullable=False, index=True)

    order = relationship("Order", back_populates="menus")
    menu = relationship("Menu")
