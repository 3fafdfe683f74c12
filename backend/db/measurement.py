from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from .base import Base


class MeasurementUnit(Base):
    __tablename__ = "measurement_units"

    unit_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    used_in_stock = Column(Boolean, nullable=False, default=False)

    unit_type = relationship("MeasurementUnitType", back_populates="unit", uselist=False)

    @property
    def to_schema(self):
        return {"unit_id": self.unit_id, "name": self.name, "used_in_stock": self.used_in_stock}


class MeasurementType(Base):
    """Category of mutually convertible units, all routed through ``ref_unit``"""
    __tablename__ = "measurement_types"

    type_id = Column(Integer, primary_key=True, autoincrement=True)
    ref_unit_id = Column(Integer, ForeignKey("measurement_units.unit_id"), nullable=True)
    name = Column(String, nullable=False, unique=True)

    ref_unit = relationship("MeasurementUnit", foreign_keys=[ref_unit_id])

    @property
    def to_schema(self):
        return {"type_id": self.type_id, "ref_unit_id": self.ref_unit_id, "name": self.name}


class MeasurementUnitType(Base):
    """Junction unit <-> type, with the unit's factor relative to the type's reference unit"""
    __tablename__ = "measurement_units_types"

    mut_id = Column(Integer, primary_key=True, autoincrement=True)
    unit_id = Column(Integer, ForeignKey("measurement_units.unit_id", ondelete="CASCADE"), nullable=False, unique=True)
    type_id = Column(Integer, ForeignKey("measurement_types.type_id", ondelete="CASCADE"), nullable=False, index=True)
    as_ref_unit = Column(Float, nullable=False)

    unit = relationship("MeasurementUnit", back_populates="unit_type")
    type = relationship("MeasurementType")
