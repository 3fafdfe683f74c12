from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List

from core.errors import unwrap
from db.database import get_async_session
from schemas.measurement import ConvertRequest, ConvertResponse, MeasurementRead, TypeRead, UnitRead
from services import measurement

router = APIRouter()


@router.get("/", response_model=List[MeasurementRead])
async def list_measurements(for_stock: bool = False, db: AsyncSession = Depends(get_async_session)):
    return [MeasurementRead(**m.to_schema) for m in await measurement.list_measurements(db, for_stock)]


@router.get("/grouped", response_model=Dict[str, List[MeasurementRead]])
async def list_measurements_by_type(for_stock: bool = False, db: AsyncSession = Depends(get_async_session)):
    grouped = await measurement.list_measurements(db, for_stock, grouped=True)
    return {name: [MeasurementRead(**m.to_schema) for m in items] for name, items in grouped.items()}


@router.get("/units", response_model=List[UnitRead])
async def list_units(db: AsyncSession = Depends(get_async_session)):
    return [UnitRead(**u.to_schema) for u in await measurement.list_units(db)]


@router.get("/types", response_model=List[TypeRead])
async def list_types(db: AsyncSession = Depends(get_async_session)):
    return [TypeRead(**t.to_schema) for t in await measurement.list_types(db)]


@router.get("/units/{name}", response_model=MeasurementRead)
async def get_measurement(name: str, db: AsyncSession = Depends(get_async_session)):
    return MeasurementRead(**unwrap(await measurement.get_by_name(db, name)).to_schema)


@router.get("/units/id/{unit_id}", response_model=MeasurementRead)
async def get_measurement_by_id(unit_id: int, db: AsyncSession = Depends(get_async_session)):
    return MeasurementRead(**unwrap(await measurement.get_by_id(db, unit_id)).to_schema)


@router.post("/convert", response_model=ConvertResponse)
async def convert(payload: ConvertRequest, db: AsyncSession = Depends(get_async_session)):
    value = unwrap(await measurement.convert(db, payload.value, payload.from_unit, payload.to_unit))
    return ConvertResponse(value=value, unit=payload.to_unit)
