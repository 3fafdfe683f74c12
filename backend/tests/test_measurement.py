import pytest

from core.errors import ErrorKind
from core.units import ConverterRegistry
from services import measurement
from helpers import assert_err


class TestConvert:
    """Conversions go through the type's reference unit."""

    @pytest.mark.asyncio
    async def test_identity_needs_no_lookup(self, db):
        # unknown names are fine when both sides are the same unit
        assert (await measurement.convert(db, 3.5, "furlong", "furlong")).value == 3.5
        assert (await measurement.convert(db, 2.0, "kg", "kg")).value == 2.0

    @pytest.mark.asyncio
    async def test_kg_to_g_and_back(self, db):
        grams = await measurement.convert(db, 1.5, "kg", "g")
        assert grams.value == pytest.approx(1500.0)
        back = await measurement.convert(db, grams.value, "g", "kg")
        assert back.value == pytest.approx(1.5)

    @pytest.mark.asyncio
    async def test_volume(self, db):
        assert (await measurement.convert(db, 25.0, "cL", "L")).value == pytest.approx(0.25)
        assert (await measurement.convert(db, 1.0, "1 cup", "mL")).value == pytest.approx(250.0)

    @pytest.mark.asyncio
    async def test_kitchen_portions(self, db):
        assert (await measurement.convert(db, 1.0, "teaspoon", "g")).value == pytest.approx(5.0)
        assert (await measurement.convert(db, 0.01, "kg", "teaspoon")).value == pytest.approx(2.0)
        assert (await measurement.convert(db, 2.0, "pinch", "kg")).value == pytest.approx(0.01)

    @pytest.mark.asyncio
    async def test_mass_and_volume_are_incompatible(self, db):
        res = await measurement.convert(db, 1.0, "kg", "L")
        assert_err(res, ErrorKind.CONFLICT)
        assert "Incompatible" in res.error.message

    @pytest.mark.asyncio
    async def test_other_type_is_not_convertible(self, db):
        assert_err(await measurement.convert(db, 1.0, "piece", "unit"), ErrorKind.CONFLICT, "from")
        assert_err(await measurement.convert(db, 1.0, "kg", "piece"), ErrorKind.CONFLICT, "to")

    @pytest.mark.asyncio
    async def test_unknown_unit(self, db):
        assert_err(await measurement.convert(db, 1.0, "kg", "stone"), ErrorKind.NOT_FOUND, "unit")

    @pytest.mark.asyncio
    async def test_missing_converter(self, db):
        res = await measurement.convert(db, 1.0, "kg", "g", registry=ConverterRegistry())
        assert_err(res, ErrorKind.CONFLICT, "to")
        assert "Unable to convert" in res.error.message

    @pytest.mark.asyncio
    async def test_value_must_be_a_number(self, db):
        assert_err(await measurement.convert(db, float("nan"), "kg", "g"), ErrorKind.VALIDATION, "value")


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_by_name(self, db):
        m = (await measurement.get_by_name(db, "g")).value
        assert m.type_name == "mass"
        assert m.ref_unit == "kg"
        assert m.as_ref_unit == pytest.approx(0.001)
        assert (await measurement.get_by_id(db, m.unit_id)).value == m

    @pytest.mark.asyncio
    async def test_stock_units_only(self, db):
        names = {m.name for m in await measurement.list_measurements(db, for_stock=True)}
        assert {"kg", "g", "L", "piece"} <= names
        assert "teaspoon" not in names and "pinch" not in names

    @pytest.mark.asyncio
    async def test_grouped_by_type(self, db):
        grouped = await measurement.list_measurements(db, grouped=True)
        assert set(grouped) == {"mass", "volume", "other"}
        assert all(m.type_name == "volume" for m in grouped["volume"])

    @pytest.mark.asyncio
    async def test_types_point_to_reference_units(self, db):
        units = {u.unit_id: u.name for u in await measurement.list_units(db)}
        refs = {t.name: units[t.ref_unit_id] for t in await measurement.list_types(db)}
        assert refs == {"mass": "kg", "volume": "L", "other": "unit"}
