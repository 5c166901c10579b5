"""Data models used throughout the project."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional


class CabinClass(str, Enum):
    ECONOMY = "M"
    PREMIUM_ECONOMY = "W"
    BUSINESS = "C"
    FIRST = "F"


class SortKey(str, Enum):
    PRICE = "price"
    DURATION = "duration"
    DATE = "date"
    QUALITY = "quality"


@dataclass(slots=True)
class FlightQuery:
    fly_from: str
    fly_to: str
    date_from: str
    date_to: str
    return_from: Optional[str] = None
    return_to: Optional[str] = None
    adults: int = 1
    children: int = 0
    infants: int = 0
    selected_cabins: CabinClass = CabinClass.ECONOMY
    curr: str = "EUR"
    max_stopovers: int = 2
    sort: SortKey = SortKey.PRICE
    limit: int = 5


@dataclass(slots=True)
class RouteLeg:
    city_from: Optional[str] = None
    city_to: Optional[str] = None
    airline: Optional[str] = None


@dataclass(slots=True)
class FlightOffer:
    """One itinerary as returned by ``/v2/search``; any field may be missing."""

    price: Optional[float] = None
    city_from: Optional[str] = None
    city_to: Optional[str] = None
    fly_from: Optional[str] = None
    fly_to: Optional[str] = None
    local_departure: Optional[str] = None
    local_arrival: Optional[str] = None
    duration_minutes: Optional[int] = None
    airlines: Optional[List[str]] = None
    route: Optional[List[RouteLeg]] = None
    bags_price: Optional[Mapping[str, object]] = None
    deep_link: Optional[str] = None

    @property
    def stopovers(self) -> int:
        if not self.route:
            return 0
        return len(self.route) - 1


__all__ = ["CabinClass", "SortKey", "FlightQuery", "RouteLeg", "FlightOffer"]
