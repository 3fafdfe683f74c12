from sqlalchemy import Column, Date, Integer, Numeric
from .base import Base


class SalesStatistic(Base):
    """One row per calendar day, created lazily by the first sale of the day"""
    __tablename__ = "sales_statistics"

    stat_id = Column(Integer, primary_key=True, autoincrement=True)
    day = Column(Date, nullable=False, unique=True)
    benefits = Column(Numeric(12, 2), nullable=False, default=0)

    @property
    def to_schema(self):
        return {"stat_id": self.stat_id, "day": self.day, "benefits": float(self.benefits or 0)}
