"""
Seed the measurement reference data (units, types, unit/type factors).

Units are reference data shared by stock and menus, seeded on startup. The
seed is idempotent: existing rows are kept, missing ones are added.
"""
import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.units import TYPE_DEFINITIONS, UNIT_DEFINITIONS
from .measurement import MeasurementType, MeasurementUnit, MeasurementUnitType

logger = logging.getLogger(__name__)


async def seed_measurements(db: AsyncSession) -> Dict[str, MeasurementUnit]:
    """
    Insert missing measurement units, types and junction rows.

    Returns:
        dict: unit name -> MeasurementUnit
    """
    res = await db.execute(select(MeasurementUnit))
    units = {u.name: u for u in res.scalars().all()}
    created = 0
    for definition in UNIT_DEFINITIONS:
        if definition.name not in units:
            unit = MeasurementUnit(name=definition.name, used_in_stock=definition.used_in_stock)
            db.add(unit)
            units[definition.name] = unit
            created += 1
    await db.flush()

    res = await db.execute(select(MeasurementType))
    types = {t.name: t for t in res.scalars().all()}
    for type_name, ref_unit_name in TYPE_DEFINITIONS.items():
        if type_name not in types:
            mtype = MeasurementType(name=type_name, ref_unit_id=units[ref_unit_name].unit_id)
            db.add(mtype)
            types[type_name] = mtype
    await db.flush()

    res = await db.execute(select(MeasurementUnitType.unit_id))
    linked = {row[0] for row in res.all()}
    for definition in UNIT_DEFINITIONS:
        unit = units[definition.name]
        if unit.unit_id not in linked:
            db.add(
                MeasurementUnitType(
                    unit_id=unit.unit_id,
                    type_id=types[definition.type_name].type_id,
                    as_ref_unit=definition.as_ref_unit,
                )
            )

    await db.commit()
    if created:
        logger.info("Seeded %d measurement units", created)
    return units
