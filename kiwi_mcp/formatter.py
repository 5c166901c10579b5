"""Render a Kiwi ``/v2/search`` response as plain text for the ``plan_trip`` tool.

The formatter never raises: missing or wrong-typed offer fields fall back to
placeholders, and a payload without a ``data`` array yields
:class:`UnexpectedFormat` instead of an error.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Union

from .models import FlightOffer, RouteLeg

logger = logging.getLogger(__name__)

NO_FLIGHTS_MESSAGE = "No flights found matching your criteria."
UNEXPECTED_FORMAT_MESSAGE = (
    "Unable to retrieve flight information. "
    "The API response was in an unexpected format."
)
DIVIDER = "\n---\n\n"

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.\d+)?"
    r"(?:[Zz]|[+-]\d{2}:\d{2})"
)


@dataclass(frozen=True, slots=True)
class FormattedResults:
    text: str


@dataclass(frozen=True, slots=True)
class UnexpectedFormat:
    text: str = UNEXPECTED_FORMAT_MESSAGE


FormatResult = Union[FormattedResults, UnexpectedFormat]


# ────────────────────────────────────────────────────────────────
# Mapping raw JSON onto FlightOffer
# ────────────────────────────────────────────────────────────────


def _or(value: Any, placeholder: Any) -> Any:
    return placeholder if value is None else value


def _str(item: dict, key: str) -> Optional[str]:
    value = item.get(key)
    return value if isinstance(value, str) else None


def _number(value: Any) -> Optional[float]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return float(value)
        except OverflowError:
            return None
    return None


def _to_leg(raw: Any) -> RouteLeg:
    if not isinstance(raw, dict):
        return RouteLeg()
    return RouteLeg(
        city_from=_str(raw, "cityFrom"),
        city_to=_str(raw, "cityTo"),
        airline=_str(raw, "airline"),
    )


def offer_from_dict(item: Any) -> FlightOffer:
    """Map one raw ``data[]`` entry onto a :class:`FlightOffer`.

    Values of the wrong type are treated as absent.
    """
    if not isinstance(item, dict):
        return FlightOffer()

    duration = item.get("duration")
    total = duration.get("total") if isinstance(duration, dict) else None
    if not isinstance(total, int) or isinstance(total, bool) or total < 0:
        total = None

    airlines = item.get("airlines")
    route = item.get("route")
    bags_price = item.get("bags_price")

    return FlightOffer(
        price=_number(item.get("price")),
        city_from=_str(item, "cityFrom"),
        city_to=_str(item, "cityTo"),
        fly_from=_str(item, "flyFrom"),
        fly_to=_str(item, "flyTo"),
        local_departure=_str(item, "local_departure"),
        local_arrival=_str(item, "local_arrival"),
        duration_minutes=total,
        airlines=(
            [a for a in airlines if isinstance(a, str)]
            if isinstance(airlines, list)
            else None
        ),
        route=[_to_leg(leg) for leg in route] if isinstance(route, list) else None,
        bags_price=bags_price if isinstance(bags_price, dict) else None,
        deep_link=_str(item, "deep_link"),
    )


# ────────────────────────────────────────────────────────────────
# Field rendering
# ────────────────────────────────────────────────────────────────


def format_timestamp(value: str) -> str:
    """Render an RFC 3339 timestamp as ``DD Mon YYYY, HH:MM``.

    The wall-clock time is kept in the timestamp's own offset.  Anything
    that does not parse is returned unchanged.
    """
    match = _RFC3339.fullmatch(value)
    if not match:
        return value
    try:
        parsed = datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return value
    return parsed.strftime("%d %b %Y, %H:%M")


def format_duration(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m"


def describe_stopovers(stops: int) -> str:
    if stops == 0:
        return "Direct flight"
    if stops == 1:
        return "1 stopover"
    return f"{stops} stopovers"


def _baggage_line(offer: FlightOffer, currency: str) -> str:
    if offer.bags_price is None:
        return "Baggage information not available"
    first_bag = _number(offer.bags_price.get("1")) or 0.0
    return f"First checked bag: {first_bag:.2f} {currency}"


def _offer_lines(index: int, offer: FlightOffer, currency: str) -> List[str]:
    airlines = ", ".join(offer.airlines) if offer.airlines is not None else "Unknown"
    origin = f"{_or(offer.city_from, 'Unknown')} ({_or(offer.fly_from, '???')})"
    destination = f"{_or(offer.city_to, 'Unknown')} ({_or(offer.fly_to, '???')})"
    lines = [
        f"Flight {index}: {origin} → {destination}",
        f"Price: {_or(offer.price, 0.0):.2f} {currency}",
        f"Departure: {format_timestamp(_or(offer.local_departure, 'Unknown'))}",
        f"Arrival: {format_timestamp(_or(offer.local_arrival, 'Unknown'))}",
        f"Duration: {format_duration(_or(offer.duration_minutes, 0))}",
        f"Airline(s): {airlines}",
        f"Stops: {describe_stopovers(offer.stopovers)}",
        _baggage_line(offer, currency),
        f"Booking link: {_or(offer.deep_link, 'Booking link not available')}",
    ]

    if offer.stopovers > 0 and offer.route:
        lines.append("Route details:")
        for leg_no, leg in enumerate(offer.route, start=1):
            lines.append(
                f"  Leg {leg_no}: {_or(leg.city_from, 'Unknown')}"
                f" → {_or(leg.city_to, 'Unknown')} ({_or(leg.airline, 'Unknown')})"
            )
    return lines


def format_flight_results(response: Any, currency: str) -> FormatResult:
    """Turn a raw search response into the ``plan_trip`` output text."""
    data = response.get("data") if isinstance(response, dict) else None
    if not isinstance(data, list):
        logger.warning("Unexpected API response format")
        return UnexpectedFormat()

    if not data:
        return FormattedResults(NO_FLIGHTS_MESSAGE)

    blocks = []
    for index, item in enumerate(data, start=1):
        lines = _offer_lines(index, offer_from_dict(item), currency)
        blocks.append("".join(f"{line}\n" for line in lines))

    header = f"Found {len(data)} flights matching your criteria:\n\n"
    return FormattedResults(header + DIVIDER.join(blocks))


__all__ = [
    "DIVIDER",
    "NO_FLIGHTS_MESSAGE",
    "UNEXPECTED_FORMAT_MESSAGE",
    "FormatResult",
    "FormattedResults",
    "UnexpectedFormat",
    "describe_stopovers",
    "format_duration",
    "format_flight_results",
    "format_timestamp",
    "offer_from_dict",
]
