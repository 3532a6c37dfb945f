from __future__ import annotations

from dataclasses import dataclass


class IncompatibleUnitError(ValueError):
    """Raised when converting a quantity into a unit of another dimension."""


@dataclass(frozen=True)
class Unit:
    symbol: str
    dimension: str
    # multiply by this to get the dimension's base unit
    to_base: float

    def __str__(self) -> str:
        return self.symbol


# Base units: m/s for speed, W for power, count/s for frequency
METERS_PER_SECOND = Unit("m/s", "speed", 1.0)
MILES_PER_HOUR = Unit("mi/hr", "speed", 1609.344 / 3600.0)
KILOMETERS_PER_HOUR = Unit("km/hr", "speed", 1000.0 / 3600.0)

WATT = Unit("W", "power", 1.0)

COUNT_PER_SECOND = Unit("count/s", "frequency", 1.0)
COUNT_PER_MINUTE = Unit("count/min", "frequency", 1.0 / 60.0)


@dataclass(frozen=True)
class Quantity:
    value: float
    unit: Unit

    def value_in(self, unit: Unit) -> float:
        if unit.dimension != self.unit.dimension:
            raise IncompatibleUnitError(f"Cannot convert {self.unit} to {unit}")
        if unit == self.unit:
            return float(self.value)
        return float(self.value) * self.unit.to_base / unit.to_base

    def is_compatible(self, unit: Unit) -> bool:
        return unit.dimension == self.unit.dimension

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit}"
