# src/aggregator.py

import asyncio
import logging
import time
from typing import Iterable, Optional

import httpx

from src import constants
from src.cse_client import CSEClient
from src.errors import ValidationError
from src.models import AggregatedOutcome, DateWindow, SearchRequest, SearchResult
from src.query_builder import build_query

logger = logging.getLogger(__name__)


def validate_search_request(request: SearchRequest) -> None:
    if not request.keyword or not request.keyword.strip():
        raise ValidationError("Missing required field: keyword")
    if not request.credentials.api_key or not request.credentials.search_engine_id:
        raise ValidationError("Missing required fields: apiKey or searchEngineId")


def resolve_windows(windows: Optional[list[DateWindow]]) -> list[DateWindow]:
    """An empty window list means one unconstrained window."""
    return list(windows) if windows else [DateWindow()]


def dedupe_by_title(results: Iterable[SearchResult]) -> list[SearchResult]:
    """
    Single left-to-right pass keyed on the lower-cased title.
    First occurrence wins; whitespace and punctuation are left alone.
    """
    unique: list[SearchResult] = []
    seen_titles: set[str] = set()
    for result in results:
        title = result.title.lower() if result.title else None
        if title and title not in seen_titles:
            seen_titles.add(title)
            unique.append(result)
    return unique


async def aggregate(request: SearchRequest, client: CSEClient) -> AggregatedOutcome:
    """
    Fan one search out into a CSE call per date window, join them, flatten in
    window order and deduplicate by title.

    The join is fail-fast: the first ProviderError propagates and every
    window's results, finished or not, are discarded.
    """
    validate_search_request(request)
    windows = resolve_windows(request.windows)
    queries = [build_query(request.keyword, request.extra_query_clause, w) for w in windows]

    t0 = time.perf_counter()
    per_window: list[Optional[list[SearchResult]]] = [None] * len(queries)

    async def _run(idx: int, query: str):
        per_window[idx] = await client.search(query, request.cap)

    tasks = [asyncio.create_task(_run(i, q)) for i, q in enumerate(queries)]
    await asyncio.gather(*tasks)

    combined = [result for window_results in per_window for result in window_results]
    unique = dedupe_by_title(combined)

    elapsed = time.perf_counter() - t0
    logger.info(f"Aggregated {len(combined)} results into {len(unique)} unique titles "
                f"in {elapsed:0.1f}s ({len(queries)} windows)")

    return AggregatedOutcome(
        results=unique,
        total=len(unique),
        query=constants.MULTI_WINDOW_LABEL if len(queries) > 1 else request.keyword,
    )


async def search(request: SearchRequest) -> AggregatedOutcome:
    """Convenience entry that owns its own HTTP client for one aggregation."""
    validate_search_request(request)
    limits = httpx.Limits(max_connections=max(len(request.windows), 1) * 2)
    async with httpx.AsyncClient(limits=limits) as http_client:
        client = CSEClient(http_client, request.credentials)
        return await aggregate(request, client)
