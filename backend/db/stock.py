from sqlalchemy import Boolean, CheckConstraint, Column, Date, Float, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import relationship
from .base import Base


class Stock(Base):
    __tablename__ = "stocks"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stocks_quantity_non_negative"),
    )

    stock_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    quantity = Column(Float, nullable=False, default=0.0)
    unit_id = Column(Integer, ForeignKey("measurement_units.unit_id"), nullable=False, index=True)
    unit_price = Column(Numeric(10, 2), nullable=True)
    is_orderable = Column(Boolean, nullable=False, default=False)
    is_cookable = Column(Boolean, nullable=False, default=False)
    use_by_date_min = Column(Date, nullable=True)
    use_by_date_max = Column(Date, nullable=True)

    unit = relationship("MeasurementUnit", lazy="joined")

    @property
    def to_schema(self):
        return {
            "stock_id": self.stock_id,
            "name": self.name,
            "quantity": float(self.quantity or 0),
            "unit": self.unit.name if self.unit is not None else None,
            "unit_price": float(self.unit_price) if self.unit_price is not None else None,
            "is_orderable": self.is_orderable,
            "is_cookable": self.is_cookable,
            "use_by_date_min": self.use_by_date_min,
            "use_by_date_max": self.use_by_date_max,
        }


# Names are unique regardless of case.
Index("ux_stocks_name_lower", func.lower(Stock.name), unique=True)
