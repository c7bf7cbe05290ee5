"""Client database model."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ClientDO:
    """Client data object - maps to clients table."""

    id: str
    name: str
    gsc_site_url: Optional[str] = None
    ga4_property_id: Optional[str] = None
    analytics_summary: Optional[str] = None
    snapshot_insights: Dict[str, Any] = field(default_factory=dict)
