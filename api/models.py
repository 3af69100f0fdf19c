# api/models.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from src.models import DateWindow, SearchCredentials, SearchRequest, SearchResult

# --- Request Models ---

class TimeRange(BaseModel):
    """One date window as sent by the frontend (extra keys such as `id` are ignored)."""
    after: Optional[str] = None
    before: Optional[str] = None


class SearchPayload(BaseModel):
    """Body of POST /api/search."""
    model_config = ConfigDict(populate_by_name=True)

    keyword: Optional[str] = Field(None, description="The search keyword.", examples=["chicken soup"])
    custom_dork: Optional[str] = Field(None, alias="customDork",
                                       description="Extra clause appended to every query, e.g. a site: filter.")
    time_ranges: Optional[List[TimeRange]] = Field(None, alias="timeRanges")
    max_results: Optional[int] = Field(None, alias="maxResults", gt=0,
                                       description="Cap on results per time range (default 100).")
    api_key: Optional[str] = Field(None, alias="apiKey")
    search_engine_id: Optional[str] = Field(None, alias="searchEngineId")

    def to_domain(self) -> SearchRequest:
        return SearchRequest(
            keyword=self.keyword or "",
            extra_query_clause=self.custom_dork or None,
            windows=[DateWindow(after=r.after, before=r.before) for r in (self.time_ranges or [])],
            max_results_per_window=self.max_results,
            credentials=SearchCredentials(
                api_key=self.api_key or "",
                search_engine_id=self.search_engine_id or "",
            ),
        )


class FilterPayload(BaseModel):
    """Body of POST /api/filter. `titles` is checked by the filter itself."""
    model_config = ConfigDict(populate_by_name=True)

    titles: Any = None
    use_deduplication: bool = Field(False, alias="useDeduplication")
    filter_haram: bool = Field(False, alias="filterHaram")


class ExportPayload(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)

# --- Response Models ---

class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str


class SearchResponse(BaseModel):
    success: bool = True
    results: List[SearchResult]
    total: int
    query: str


class FilterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    filtered: List[str]
    original_count: int = Field(..., alias="originalCount")
    filtered_count: int = Field(..., alias="filteredCount")


class SettingsResponse(BaseModel):
    success: bool = True
    settings: Dict[str, str] = Field(default_factory=dict)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
