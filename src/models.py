# src/models.py
from typing import List, Optional
from pydantic import BaseModel, Field

from src import constants


class DateWindow(BaseModel):
    """A date-bounded query variant. Both bounds absent means unconstrained."""
    after: Optional[str] = Field(None, description="ISO date, inclusive lower bound")
    before: Optional[str] = Field(None, description="ISO date, upper bound")

    @property
    def is_bounded(self) -> bool:
        return bool(self.after and self.before)


class SearchCredentials(BaseModel):
    api_key: str = ""
    search_engine_id: str = ""


class SearchRequest(BaseModel):
    keyword: str = ""
    extra_query_clause: Optional[str] = None
    windows: List[DateWindow] = Field(default_factory=list)
    max_results_per_window: Optional[int] = None
    credentials: SearchCredentials = Field(default_factory=SearchCredentials)

    @property
    def cap(self) -> int:
        return self.max_results_per_window or constants.CSE_DEFAULT_MAX_RESULTS


class SearchResult(BaseModel):
    title: str
    link: Optional[str] = None
    snippet: Optional[str] = None


class AggregatedOutcome(BaseModel):
    results: List[SearchResult] = Field(default_factory=list)
    total: int = 0
    query: str = ""


class FilterRequest(BaseModel):
    titles: List[str] = Field(default_factory=list)
    dedupe: bool = False
    exclude_disallowed: bool = False

    @property
    def requested(self) -> bool:
        return self.dedupe or self.exclude_disallowed


class FilterOutcome(BaseModel):
    filtered: List[str] = Field(default_factory=list)
    original_count: int = 0
    filtered_count: int = 0
