"""Validated tool inputs for the analytics adapters."""

from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .registry import GSC_MAX_ROW_LIMIT, GA4_MAX_ROW_LIMIT


class _DateRangeQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class SearchAnalyticsQuery(_DateRangeQuery):
    """Input of get_gsc_data."""

    dimensions: List[Literal["query", "page", "date", "device"]] = Field(min_length=1)
    row_limit: int = Field(default=100, alias="rowLimit", ge=1, le=GSC_MAX_ROW_LIMIT)


class WebAnalyticsQuery(_DateRangeQuery):
    """Input of get_ga4_data."""

    metrics: List[str] = Field(min_length=1)
    dimensions: Optional[List[str]] = None
    row_limit: int = Field(default=100, alias="rowLimit", ge=1, le=GA4_MAX_ROW_LIMIT)
