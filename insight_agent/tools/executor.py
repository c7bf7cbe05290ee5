"""Tool Executor - runs one tool call and always answers with text."""

import asyncio
import json
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .adapters import AdapterError
from .queries import SearchAnalyticsQuery, WebAnalyticsQuery
from .registry import GSC_TOOL_NAME, GA4_TOOL_NAME
from ..db.database_models.client import ClientDO
from ..utils.logger import get_app_logger


NO_DATA_TEXT = "No data found for this date range and dimensions."


class ToolExecutor:
    """
    Dispatches tool calls to the analytics adapters.

    ``execute`` never raises: missing configuration, invalid arguments,
    adapter failures, timeouts and empty results all come back as short
    strings that are handed to the model as the tool result.
    """

    def __init__(
        self,
        search_adapter,
        analytics_adapter,
        timeout_seconds: Optional[float] = 60.0,
        default_row_limit: int = 100
    ):
        """
        Args:
            search_adapter: Object with ``async query(site_url, SearchAnalyticsQuery)``
            analytics_adapter: Object with ``async query(property_id, WebAnalyticsQuery)``
            timeout_seconds: Per-call timeout, None to disable
            default_row_limit: rowLimit used when the model omits it or sends null
        """
        self.search_adapter = search_adapter
        self.analytics_adapter = analytics_adapter
        self.timeout_seconds = timeout_seconds
        self.default_row_limit = default_row_limit
        self.logger = get_app_logger()

    async def execute(self, tool_name: str, tool_input: Mapping[str, Any], client: ClientDO) -> str:
        """
        Execute a tool for a client.

        Args:
            tool_name: Name of the requested tool
            tool_input: Arguments chosen by the model
            client: Client whose data sources are queried

        Returns:
            Compact JSON rows on success, otherwise a human-readable message
        """
        if tool_name == GSC_TOOL_NAME:
            if not client.gsc_site_url:
                return "Error: No Search Console site configured for this client."
            query_model, adapter, source_id = SearchAnalyticsQuery, self.search_adapter, client.gsc_site_url
        elif tool_name == GA4_TOOL_NAME:
            if not client.ga4_property_id:
                return "Error: No GA4 property configured for this client."
            query_model, adapter, source_id = WebAnalyticsQuery, self.analytics_adapter, client.ga4_property_id
        else:
            self.logger.warning(f"Model requested unknown tool: {tool_name}")
            return f"Unknown tool: {tool_name}"

        arguments: Dict[str, Any] = dict(tool_input or {})
        if arguments.get("rowLimit") is None:
            arguments["rowLimit"] = self.default_row_limit
        try:
            query = query_model.model_validate(arguments)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}" for err in e.errors()
            )
            self.logger.info(f"Rejected {tool_name} arguments: {problems}")
            return f"Error: invalid arguments for {tool_name}: {problems}"

        try:
            rows = await asyncio.wait_for(adapter.query(source_id, query), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.warning(f"{tool_name} timed out after {self.timeout_seconds}s")
            return f"Tool error: {tool_name} timed out after {self.timeout_seconds:g}s"
        except AdapterError as e:
            return f"Tool error: {e}"
        except Exception as e:
            self.logger.exception(f"Unexpected failure in {tool_name}")
            return f"Tool error: {e}"

        if not rows:
            return NO_DATA_TEXT
        self.logger.debug(f"{tool_name} returned {len(rows)} rows for client {client.id}")
        return json.dumps(rows, separators=(",", ":"), ensure_ascii=False)
