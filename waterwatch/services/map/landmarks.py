"""
Authority offices and reservoirs shown around the map center.

There is no landmark table yet; ``StaticLandmarkSource`` places one water
authority and one reservoir at fixed offsets from the current center.
"""

# Standard library imports
from dataclasses import dataclass
from typing import Protocol

# Local application imports
from waterwatch.utils.geo.coordinates import Coordinate, normalize


@dataclass(frozen=True)
class Authority:
    id: str
    name: str
    location: Coordinate
    type: str
    phone: str


@dataclass(frozen=True)
class Reservoir:
    id: str
    name: str
    location: Coordinate
    capacity: int
    current_level: int

    @property
    def fill_percentage(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return round(self.current_level / self.capacity * 100, 1)


class LandmarkSource(Protocol):
    def authorities_near(self, center: Coordinate) -> list[Authority]: ...

    def reservoirs_near(self, center: Coordinate) -> list[Reservoir]: ...


def _offset(center: Coordinate, delta: float) -> Coordinate:
    shifted = normalize((center.lat + delta, center.lng + delta))
    return shifted if shifted is not None else center


class StaticLandmarkSource:
    AUTHORITY_OFFSET = 0.002
    RESERVOIR_OFFSET = 0.003

    def authorities_near(self, center: Coordinate) -> list[Authority]:
        return [
            Authority(
                id="1",
                name="Water Supply Department",
                location=_offset(center, self.AUTHORITY_OFFSET),
                type="government",
                phone="+91-11-12345678",
            )
        ]

    def reservoirs_near(self, center: Coordinate) -> list[Reservoir]:
        return [
            Reservoir(
                id="1",
                name="Central Reservoir",
                location=_offset(center, self.RESERVOIR_OFFSET),
                capacity=10000,
                current_level=8500,
            )
        ]
