"""Tool Registry - immutable catalog of the data tools offered to the model."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


GSC_TOOL_NAME = "get_gsc_data"
GA4_TOOL_NAME = "get_ga4_data"

GSC_MAX_ROW_LIMIT = 25000
GA4_MAX_ROW_LIMIT = 100000


@dataclass(frozen=True)
class ToolDefinition:
    """One callable tool: name, when to use it, and its input schema."""

    name: str
    description: str
    input_schema: Mapping[str, Any]
    status_text: str = field(default="Working…")

    def to_api(self) -> Dict[str, Any]:
        """Render in the shape the model provider expects."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": _thaw(self.input_schema),
        }


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


class ToolRegistry:
    """Fixed, ordered set of tool definitions, passed to the agent loop."""

    def __init__(self, definitions: Tuple[ToolDefinition, ...]):
        self._definitions = tuple(definitions)
        self._by_name = {d.name: d for d in self._definitions}

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Look up a definition by tool name."""
        return self._by_name.get(name)

    def names(self) -> List[str]:
        return [d.name for d in self._definitions]

    def to_api(self) -> List[Dict[str, Any]]:
        """All definitions in provider shape."""
        return [d.to_api() for d in self._definitions]

    def status_text(self, name: str) -> str:
        """Status line shown while a tool runs."""
        definition = self._by_name.get(name)
        return definition.status_text if definition else f"Running {name}…"

    def subset(self, *names: str) -> "ToolRegistry":
        """A reduced registry with only the given tools."""
        return ToolRegistry(tuple(d for d in self._definitions if d.name in names))


GSC_TOOL = ToolDefinition(
    name=GSC_TOOL_NAME,
    description="""Query Google Search Console search analytics data for this client.
Use this whenever the question involves keywords, queries, pages, clicks, impressions, CTR, rankings, or organic search trends.
You can call this multiple times with different date ranges to compare periods.

Available dimensions (pass one or more):
  "query"  - keyword/search term level
  "page"   - landing page URL level
  "date"   - daily breakdown
  "device" - desktop / mobile / tablet

Date format: YYYY-MM-DD
rowLimit: max rows to return (default 100, max 25000)

Examples:
  - Top pages by clicks this month: dimensions=["page"], last 30 days
  - Daily trend for a keyword: dimensions=["date","query"], filter by date range
  - Compare page clicks period over period: call twice with different date ranges""",
    input_schema=_freeze({
        "type": "object",
        "properties": {
            "dimensions": {
                "type": "array",
                "items": {"type": "string", "enum": ["query", "page", "date", "device"]},
                "description": "Dimensions to group by",
            },
            "startDate": {"type": "string", "description": "Start date YYYY-MM-DD"},
            "endDate": {"type": "string", "description": "End date YYYY-MM-DD"},
            "rowLimit": {"type": "number", "description": "Max rows to return (default 100, max 25000)"},
        },
        "required": ["dimensions", "startDate", "endDate"],
    }),
    status_text="Querying Search Console…",
)

GA4_TOOL = ToolDefinition(
    name=GA4_TOOL_NAME,
    description="""Query Google Analytics 4 data for this client.
Use this for questions about sessions, users, pageviews, revenue, conversions, traffic sources, or landing page performance.
You can call this multiple times with different date ranges or metric/dimension combinations.

Common metrics: sessions, totalUsers, screenPageViews, bounceRate, purchaseRevenue, transactions, averageSessionDuration
Common dimensions: sessionDefaultChannelGroup, landingPage, yearMonth, date, deviceCategory, country

Date format: YYYY-MM-DD
rowLimit: max rows to return (default 100)

Examples:
  - Top landing pages by sessions: dimensions=["landingPage"], metrics=["sessions"]
  - Monthly session trend: dimensions=["yearMonth"], metrics=["sessions","totalUsers"]
  - Channel breakdown: dimensions=["sessionDefaultChannelGroup"], metrics=["sessions"]""",
    input_schema=_freeze({
        "type": "object",
        "properties": {
            "metrics": {
                "type": "array",
                "items": {"type": "string"},
                "description": "GA4 metric names",
            },
            "dimensions": {
                "type": "array",
                "items": {"type": "string"},
                "description": "GA4 dimension names (optional)",
            },
            "startDate": {"type": "string", "description": "Start date YYYY-MM-DD"},
            "endDate": {"type": "string", "description": "End date YYYY-MM-DD"},
            "rowLimit": {"type": "number", "description": "Max rows to return (default 100)"},
        },
        "required": ["metrics", "startDate", "endDate"],
    }),
    status_text="Querying Google Analytics…",
)


def default_registry() -> ToolRegistry:
    """The two analytics tools, search first."""
    return ToolRegistry((GSC_TOOL, GA4_TOOL))
