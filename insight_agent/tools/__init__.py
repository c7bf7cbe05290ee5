"""Data tools - registry, validated inputs, adapters and executor."""

from .registry import (
    ToolDefinition,
    ToolRegistry,
    default_registry,
    GSC_TOOL_NAME,
    GA4_TOOL_NAME
)
from .queries import SearchAnalyticsQuery, WebAnalyticsQuery
from .adapters import (
    AdapterError,
    DataSourceNotConfigured,
    UpstreamQueryError,
    GoogleOAuthSession,
    SearchConsoleAdapter,
    AnalyticsDataAdapter
)
from .executor import ToolExecutor, NO_DATA_TEXT

__all__ = [
    "ToolDefinition",
    "ToolRegistry",
    "default_registry",
    "GSC_TOOL_NAME",
    "GA4_TOOL_NAME",
    "SearchAnalyticsQuery",
    "WebAnalyticsQuery",
    "AdapterError",
    "DataSourceNotConfigured",
    "UpstreamQueryError",
    "GoogleOAuthSession",
    "SearchConsoleAdapter",
    "AnalyticsDataAdapter",
    "ToolExecutor",
    "NO_DATA_TEXT",
]
