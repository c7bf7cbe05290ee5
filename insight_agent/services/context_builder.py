"""Context Builder - the system instruction block for one request."""

from datetime import date, timedelta
from typing import List, Optional

from ..db.database_models.client import ClientDO


NOT_CONFIGURED = "not configured"

BEHAVIOUR = """You have two tools available to fetch live data:
- get_gsc_data: Query Google Search Console (keywords, pages, clicks, impressions, rankings)
- get_ga4_data: Query Google Analytics 4 (sessions, users, traffic, revenue, landing pages)

When a question requires data, use the tools to fetch it rather than saying you don't have it.
For trend or comparison questions, call the tool twice - once for the current period and once for the prior period - then calculate the delta yourself.
Be specific and direct. Skip preamble. Lead with the actual answer, then support it with data."""


def reference_date(today: Optional[date] = None, lag_days: int = 1) -> date:
    """The date the model treats as today; search data lags, so it defaults to yesterday."""
    return (today or date.today()) - timedelta(days=lag_days)


def build_instructions(client: ClientDO, today: Optional[date] = None, lag_days: int = 1) -> str:
    """
    Build the instruction block for a client.

    Sections appear in fixed order: client name, date, data sources, stored
    analytics summary, then takeaway/anomaly/opportunity notes. Called on
    every request so edits to the client record show up immediately.

    Args:
        client: Client record
        today: Override for the current date
        lag_days: Days subtracted from today for the reference date

    Returns:
        System instruction text
    """
    parts: List[str] = [
        f"Client: {client.name}",
        f"Today's date: {reference_date(today, lag_days).isoformat()}",
        f"GSC site: {client.gsc_site_url or NOT_CONFIGURED}",
        f"GA4 property: {client.ga4_property_id or NOT_CONFIGURED}",
    ]

    if client.analytics_summary:
        parts.append(f"Stored Analytics Summary:\n{client.analytics_summary}")

    insights = client.snapshot_insights if isinstance(client.snapshot_insights, dict) else {}
    if insights.get("takeaways"):
        parts.append(f"Key Takeaways: {insights['takeaways']}")
    if insights.get("anomalies"):
        parts.append(f"Anomalies: {insights['anomalies']}")
    if insights.get("opportunities"):
        parts.append(f"Opportunities: {insights['opportunities']}")

    context = "\n\n".join(parts)
    return (
        "You are an expert SEO and digital marketing strategist advising the agency's "
        "internal team on a specific client.\n\n"
        f"{context}\n\n"
        f"{BEHAVIOUR}"
    )
