from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

from .models import CabinClass, FlightQuery, SortKey

E = TypeVar("E", bound=Enum)

REQUIRED_FIELDS = ("fly_from", "fly_to", "date_from", "date_to")


class QueryError(ValueError):
    """Caller supplied missing or invalid tool arguments."""


def _invalid(name: str) -> QueryError:
    return QueryError(f"Missing or invalid {name} parameter")


def _count(args: Mapping[str, Any], name: str, default: int) -> int:
    value = args.get(name)
    # JSON booleans decode to bool, which is an int subclass
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return default


def _optional_str(args: Mapping[str, Any], name: str) -> Optional[str]:
    value = args.get(name)
    return value if isinstance(value, str) else None


def _choice(args: Mapping[str, Any], name: str, enum: Type[E], default: E) -> E:
    value = args.get(name)
    if not isinstance(value, str):
        return default
    try:
        return enum(value)
    except ValueError:
        raise _invalid(name) from None


def build_query(arguments: Optional[Mapping[str, Any]]) -> FlightQuery:
    """Validate raw ``plan_trip`` arguments into a :class:`FlightQuery`.

    The four mandatory fields must be strings; every optional field falls
    back to its default when absent or of the wrong type.
    """
    if arguments is None or not isinstance(arguments, Mapping):
        raise QueryError("Missing arguments")

    required: Dict[str, str] = {}
    for name in REQUIRED_FIELDS:
        value = arguments.get(name)
        if not isinstance(value, str):
            raise _invalid(name)
        required[name] = value

    curr = arguments.get("curr")
    return FlightQuery(
        **required,
        return_from=_optional_str(arguments, "return_from"),
        return_to=_optional_str(arguments, "return_to"),
        adults=_count(arguments, "adults", 1),
        children=_count(arguments, "children", 0),
        infants=_count(arguments, "infants", 0),
        selected_cabins=_choice(
            arguments, "selected_cabins", CabinClass, CabinClass.ECONOMY
        ),
        curr=curr if isinstance(curr, str) else "EUR",
        max_stopovers=_count(arguments, "max_stopovers", 2),
        sort=_choice(arguments, "sort", SortKey, SortKey.PRICE),
        limit=_count(arguments, "limit", 5),
    )


def query_params(query: FlightQuery) -> Dict[str, Any]:
    """Return the ``/v2/search`` query string parameters for *query*."""
    params: Dict[str, Any] = {
        "fly_from": query.fly_from,
        "fly_to": query.fly_to,
        "date_from": query.date_from,
        "date_to": query.date_to,
        "adults": query.adults,
        "children": query.children,
        "infants": query.infants,
        "selected_cabins": query.selected_cabins.value,
        "curr": query.curr,
        "max_stopovers": query.max_stopovers,
        "sort": query.sort.value,
        "limit": query.limit,
    }
    if query.return_from is not None:
        params["return_from"] = query.return_from
    if query.return_to is not None:
        params["return_to"] = query.return_to
    return params


__all__ = ["QueryError", "REQUIRED_FIELDS", "build_query", "query_params"]
