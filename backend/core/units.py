"""
Unit definitions and the converter registry of the measurement engine.

Every measurement type routes its conversions through a reference unit
(``kg`` for mass, ``L`` for volume). A value is first brought to the reference
unit with the source unit's ``as_ref_unit`` factor, then the destination's
registered converter turns the reference amount into the destination unit.
Kitchen units (teaspoon, pinch, cups...) are empirical portions, not SI
multiples, so each destination gets its own converter instead of a factor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Protocol


MASS = "mass"
VOLUME = "volume"
OTHER = "other"  # never convertible


class UnitConverter(Protocol):
    def convert(self, value: float) -> float:
        ...


@dataclass(frozen=True)
class ScaleConverter:
    """Linear conversion from the reference unit: ``value * factor``."""

    factor: float

    def convert(self, value: float) -> float:
        return value * self.factor


@dataclass(frozen=True)
class PortionConverter:
    """Reference unit -> base unit (g or mL) -> number of portions of ``portion`` base units."""

    base_factor: float
    portion: float

    def convert(self, value: float) -> float:
        return value * self.base_factor / self.portion


class ConverterRegistry:
    def __init__(self) -> None:
        self._converters: Dict[str, UnitConverter] = {}

    def register(self, unit_name: str, converter: UnitConverter) -> None:
        self._converters[unit_name] = converter

    def get(self, unit_name: str) -> Optional[UnitConverter]:
        return self._converters.get(unit_name)

    def __contains__(self, unit_name: object) -> bool:
        return unit_name in self._converters

    def __iter__(self) -> Iterator[str]:
        return iter(self._converters)


@dataclass(frozen=True)
class UnitDefinition:
    name: str
    type_name: str
    as_ref_unit: float
    used_in_stock: bool
    converter: Optional[UnitConverter] = None


G_PER_KG = 1000.0
ML_PER_L = 1000.0

# Reference unit of each measurement type
TYPE_DEFINITIONS: Dict[str, str] = {
    MASS: "kg",
    VOLUME: "L",
    OTHER: "unit",
}

UNIT_DEFINITIONS: List[UnitDefinition] = [
    # Mass, reference kg
    UnitDefinition("kg", MASS, 1.0, True, ScaleConverter(1.0)),
    UnitDefinition("g", MASS, 0.001, True, ScaleConverter(G_PER_KG)),
    UnitDefinition("mg", MASS, 0.000001, True, ScaleConverter(1000000.0)),
    UnitDefinition("oz", MASS, 0.028349523125, True, ScaleConverter(35.27396194958041)),
    UnitDefinition("lb", MASS, 0.45359237, True, ScaleConverter(2.2046226218487757)),
    UnitDefinition("teaspoon", MASS, 0.005, False, PortionConverter(G_PER_KG, 5.0)),
    UnitDefinition("tablespoon", MASS, 0.015, False, PortionConverter(G_PER_KG, 15.0)),
    UnitDefinition("knob", MASS, 0.004, False, PortionConverter(G_PER_KG, 4.0)),
    UnitDefinition("walnut", MASS, 0.015, False, PortionConverter(G_PER_KG, 15.0)),
    UnitDefinition("stick of butter", MASS, 0.113, False, PortionConverter(G_PER_KG, 113.0)),
    UnitDefinition("pinch", MASS, 0.005, False, PortionConverter(G_PER_KG, 5.0)),
    # Volume, reference L
    UnitDefinition("L", VOLUME, 1.0, True, ScaleConverter(1.0)),
    UnitDefinition("cL", VOLUME, 0.01, True, ScaleConverter(100.0)),
    UnitDefinition("mL", VOLUME, 0.001, True, ScaleConverter(ML_PER_L)),
    UnitDefinition("fl-oz", VOLUME, 0.0295735295625, True, ScaleConverter(33.814022701843)),
    UnitDefinition("qt", VOLUME, 0.946352946, True, ScaleConverter(1.0566882094325938)),
    UnitDefinition("1 cup", VOLUME, 0.25, False, PortionConverter(ML_PER_L, 250.0)),
    UnitDefinition("1/2 cup", VOLUME, 0.125, False, PortionConverter(ML_PER_L, 125.0)),
    UnitDefinition("1/3 cup", VOLUME, 0.08, False, PortionConverter(ML_PER_L, 80.0)),
    UnitDefinition("1/4 cup", VOLUME, 0.06, False, PortionConverter(ML_PER_L, 60.0)),
    # Counted items
    UnitDefinition("unit", OTHER, 1.0, True),
    UnitDefinition("piece", OTHER, 1.0, True),
    UnitDefinition("slice", OTHER, 1.0, True),
    UnitDefinition("bunch", OTHER, 1.0, True),
]


def default_registry() -> ConverterRegistry:
    registry = ConverterRegistry()
    for definition in UNIT_DEFINITIONS:
        if definition.converter is not None:
            registry.register(definition.name, definition.converter)
    return registry


registry = default_registry()
