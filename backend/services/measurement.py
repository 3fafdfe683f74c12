"""
Measurement engine: unit lookups and conversions between units of one type.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from core.errors import Ok, Result, conflict, not_found, validation
from core.units import OTHER, ConverterRegistry, registry as default_registry
from db.database import MeasurementType, MeasurementUnit, MeasurementUnitType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Measurement:
    unit_id: int
    name: str
    used_in_stock: bool
    as_ref_unit: float
    type_id: int
    type_name: str
    ref_unit_id: Optional[int]
    ref_unit: Optional[str]

    @property
    def is_convertible(self) -> bool:
        return self.type_name != OTHER

    @property
    def to_schema(self):
        return {
            "unit": {
                "unit_id": self.unit_id,
                "name": self.name,
                "used_in_stock": self.used_in_stock,
                "as_ref_unit": self.as_ref_unit,
            },
            "type": {
                "type_id": self.type_id,
                "ref_unit_id": self.ref_unit_id,
                "ref_unit": self.ref_unit,
                "name": self.type_name,
            },
        }


def _measurement_query():
    ref_unit = aliased(MeasurementUnit)
    return (
        select(
            MeasurementUnit.unit_id,
            MeasurementUnit.name,
            MeasurementUnit.used_in_stock,
            MeasurementUnitType.as_ref_unit,
            MeasurementType.type_id,
            MeasurementType.name.label("type_name"),
            MeasurementType.ref_unit_id,
            ref_unit.name.label("ref_unit"),
        )
        .join(MeasurementUnitType, MeasurementUnitType.unit_id == MeasurementUnit.unit_id)
        .join(MeasurementType, MeasurementType.type_id == MeasurementUnitType.type_id)
        .outerjoin(ref_unit, ref_unit.unit_id == MeasurementType.ref_unit_id)
        .order_by(MeasurementUnitType.mut_id)
    )


def _to_measurement(row) -> Measurement:
    return Measurement(
        unit_id=row.unit_id,
        name=row.name,
        used_in_stock=bool(row.used_in_stock),
        as_ref_unit=float(row.as_ref_unit),
        type_id=row.type_id,
        type_name=row.type_name,
        ref_unit_id=row.ref_unit_id,
        ref_unit=row.ref_unit,
    )


async def get_by_name(db: AsyncSession, name: str) -> Result[Measurement]:
    res = await db.execute(_measurement_query().where(MeasurementUnit.name == name))
    row = res.first()
    if row is None:
        return not_found(f'No measurement unit found with the name "{name}".', ["unit"])
    return Ok(_to_measurement(row))


async def get_by_id(db: AsyncSession, unit_id: int) -> Result[Measurement]:
    res = await db.execute(_measurement_query().where(MeasurementUnit.unit_id == unit_id))
    row = res.first()
    if row is None:
        return not_found(f'No measurement unit found with the id "{unit_id}".', ["unit_id"])
    return Ok(_to_measurement(row))


async def list_measurements(
    db: AsyncSession, for_stock: bool = False, grouped: bool = False
) -> Union[List[Measurement], Dict[str, List[Measurement]]]:
    """All units with their type; ``for_stock`` keeps units usable as stock quantities."""
    stmt = _measurement_query()
    if for_stock:
        stmt = stmt.where(MeasurementUnit.used_in_stock == True)  # noqa: E712
    res = await db.execute(stmt)
    measurements = [_to_measurement(r) for r in res.all()]
    if not grouped:
        return measurements
    by_type: Dict[str, List[Measurement]] = {}
    for m in measurements:
        by_type.setdefault(m.type_name, []).append(m)
    return by_type


async def list_units(db: AsyncSession) -> List[MeasurementUnit]:
    res = await db.execute(select(MeasurementUnit).order_by(MeasurementUnit.unit_id))
    return list(res.scalars().all())


async def list_types(db: AsyncSession) -> List[MeasurementType]:
    res = await db.execute(select(MeasurementType).order_by(MeasurementType.type_id))
    return list(res.scalars().all())


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


async def convert(
    db: AsyncSession,
    value: float,
    from_unit: str,
    to_unit: str,
    registry: Optional[ConverterRegistry] = None,
) -> Result[float]:
    """
    Convert ``value`` expressed in ``from_unit`` into ``to_unit``.

    Same unit names short-circuit without any lookup. Otherwise both units
    must exist, be convertible (not of the "other" type) and share a type;
    the value is moved to the type's reference unit and then handed to the
    destination's registered converter.
    """
    if from_unit == to_unit:
        return Ok(value)
    if not _is_number(value):
        return validation("You must provide a valid value to convert.", ["value"])

    registry = registry or default_registry

    source = await get_by_name(db, from_unit)
    if not source.ok:
        return source
    target = await get_by_name(db, to_unit)
    if not target.ok:
        return target
    source, target = source.value, target.value

    if not source.is_convertible:
        return conflict(f'The unit "{source.name}" isn\'t convertible.', ["from"])
    if not target.is_convertible:
        return conflict(f'The unit "{target.name}" isn\'t convertible.', ["to"])
    if source.type_id != target.type_id:
        return conflict(
            f'Incompatible units: "{source.name}" is a {source.type_name} unit, "{target.name}" is a {target.type_name} unit.',
            ["from", "to"],
        )

    converter = registry.get(target.name)
    if converter is None:
        logger.warning("No converter registered for unit %r", target.name)
        return conflict(f'Unable to convert from "{source.name}" to "{target.name}".', ["to"])

    in_ref_unit = value * source.as_ref_unit
    return Ok(converter.convert(in_ref_unit))
