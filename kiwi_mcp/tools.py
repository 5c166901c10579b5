from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .formatter import format_flight_results
from .kiwi_fetcher import KiwiFetcher
from .models import CabinClass, SortKey
from .query import REQUIRED_FIELDS, build_query

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Tool:
    name: str
    description: Optional[str]
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "inputSchema": self.input_schema}
        if self.description is not None:
            out["description"] = self.description
        return out


@dataclass(slots=True)
class ToolContent:
    text: str
    type: str = "text"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text}


class ToolExecutor(abc.ABC):
    """A callable tool exposed over ``tools/list`` and ``tools/call``."""

    @abc.abstractmethod
    def execute(self, arguments: Optional[Mapping[str, Any]]) -> List[ToolContent]:
        ...

    @abc.abstractmethod
    def to_tool(self) -> Tool:
        ...


class ToolRegistry:
    def __init__(self) -> None:
        self._tools: Dict[str, ToolExecutor] = {}

    def register(self, executor: ToolExecutor) -> None:
        name = executor.to_tool().name
        if name in self._tools:
            logger.warning("Replacing already registered tool %s", name)
        self._tools[name] = executor

    def get(self, name: str) -> Optional[ToolExecutor]:
        return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        return [executor.to_tool() for executor in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)


# ────────────────────────────────────────────────────────────────
# plan_trip
# ────────────────────────────────────────────────────────────────

PLAN_TRIP_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "fly_from": {
            "type": "string",
            "description": "IATA code of departure location (e.g., 'LHR', 'NYC', 'UK')",
        },
        "fly_to": {
            "type": "string",
            "description": "IATA code of arrival location",
        },
        "date_from": {
            "type": "string",
            "description": "Departure date in format dd/mm/yyyy",
        },
        "date_to": {
            "type": "string",
            "description": "Latest departure date in format dd/mm/yyyy",
        },
        "return_from": {
            "type": "string",
            "description": "Return departure date in format dd/mm/yyyy (for round trips)",
        },
        "return_to": {
            "type": "string",
            "description": "Latest return departure date in format dd/mm/yyyy (for round trips)",
        },
        "adults": {"type": "integer", "description": "Number of adult passengers"},
        "children": {"type": "integer", "description": "Number of child passengers"},
        "infants": {"type": "integer", "description": "Number of infant passengers"},
        "selected_cabins": {
            "type": "string",
            "description": "Cabin class: M (economy), W (economy premium), C (business), F (first class)",
            "enum": [c.value for c in CabinClass],
        },
        "curr": {
            "type": "string",
            "description": "Currency for prices (e.g., EUR, USD, GBP)",
        },
        "max_stopovers": {
            "type": "integer",
            "description": "Maximum number of stopovers",
        },
        "sort": {
            "type": "string",
            "description": "Sort results by (price, duration, date, quality)",
            "enum": [s.value for s in SortKey],
        },
        "limit": {
            "type": "integer",
            "description": "Maximum number of results to return",
        },
    },
    "required": list(REQUIRED_FIELDS),
}


class PlanTripTool(ToolExecutor):
    """Search Kiwi for flights and return them as readable text."""

    name = "plan_trip"

    def __init__(self, fetcher: KiwiFetcher) -> None:
        self.fetcher = fetcher

    def execute(self, arguments: Optional[Mapping[str, Any]]) -> List[ToolContent]:
        logger.debug("Executing %s", self.name)
        query = build_query(arguments)
        body = self.fetcher.search(query)
        result = format_flight_results(body, query.curr)
        return [ToolContent(text=result.text)]

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=(
                "Search for flights between destinations with flexible date options"
            ),
            input_schema=PLAN_TRIP_SCHEMA,
        )


__all__ = [
    "PLAN_TRIP_SCHEMA",
    "PlanTripTool",
    "Tool",
    "ToolContent",
    "ToolExecutor",
    "ToolRegistry",
]
