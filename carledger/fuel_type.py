"""FuelType enum for vehicle propulsion."""

from enum import Enum


class FuelType(Enum):
    GASOLINE = "gasoline"
    DIESEL = "diesel"
    HYBRID = "hybrid"
    ELECTRIC = "electric"

    @classmethod
    def parse(cls, value) -> "FuelType":
        """Accept an enum member, its value, or its name in any case."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if text in (member.value, member.name.lower()):
                return member
        raise ValueError(f"Unknown fuel type: {value!r}")
