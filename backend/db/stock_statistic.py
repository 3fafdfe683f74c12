from sqlalchemy import Column, Date, Float, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from .base import Base


class StockStatistic(Base):
    """On-hand quantity of one stock item on a given day, in the item's unit"""
    __tablename__ = "stock_statistics"
    __table_args__ = (
        UniqueConstraint("stock_id", "day", name="uq_stock_statistics_stock_day"),
    )

    stat_id = Column(Integer, primary_key=True, autoincrement=True)
    stock_id = Column(Integer, ForeignKey("stocks.stock_id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False, index=True)
    units = Column(Float, nullable=False, default=0.0)

    stock = relationship("Stock", lazy="joined")

    @property
    def to_schema(self):
        return {
            "stat_id": self.stat_id,
            "stock_id": self.stock_id,
            "name": self.stock.name if self.stock is not None else None,
            "unit": self.stock.unit.name if self.stock is not None and self.stock.unit is not None else None,
            "day": self.day,
            "units": float(self.units or 0),
        }
