# src/cse_client.py

import asyncio
import logging
import httpx

from src import constants
from src.errors import ProviderError
from src.models import SearchCredentials, SearchResult

logger = logging.getLogger(__name__)


def _upstream_message(exc: Exception) -> str:
    """Prefer the `error.message` of a CSE error payload over the bare HTTP text."""
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            payload = exc.response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = (payload.get("error") or {}).get("message")
            if message:
                return message
    return str(exc) or exc.__class__.__name__


class CSEClient:
    """
    Paginated Google Custom Search client for a single query.

    One instance is shared by every window of an aggregation; it holds no
    per-query state, so concurrent `search()` calls are independent.
    """

    def __init__(self, http_client: httpx.AsyncClient, credentials: SearchCredentials,
                 page_size: int = constants.CSE_PAGE_SIZE,
                 max_start_index: int = constants.CSE_MAX_START_INDEX,
                 page_delay: float = constants.CSE_PAGE_DELAY):
        self.http_client = http_client
        self.credentials = credentials
        self.page_size = page_size
        self.max_start_index = max_start_index
        self.page_delay = page_delay

    async def fetch_page(self, query: str, start: int, num: int) -> dict:
        """Fire one CSE request and return the decoded JSON body."""
        params = {
            "key": self.credentials.api_key,
            "cx": self.credentials.search_engine_id,
            "q": query,
            "start": start,
            "num": num,
        }
        logger.info(f"Searching: {query} (start: {start})")
        try:
            r = await self.http_client.get(constants.CSE_ENDPOINT, params=params,
                                           timeout=constants.CSE_TIMEOUT)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            message = _upstream_message(e)
            logger.error(f"Google CSE API error for '{query[:60]}': {message}")
            raise ProviderError(f"Google CSE API error: {message}") from e

        if isinstance(data, dict) and data.get("error"):
            message = data["error"].get("message") or "unknown error"
            logger.error(f"Google CSE API error for '{query[:60]}': {message}")
            raise ProviderError(f"Google CSE API error: {message}")
        return data

    async def search(self, query: str, max_results: int = constants.CSE_DEFAULT_MAX_RESULTS) -> list[SearchResult]:
        """
        Page through CSE results for `query` until `max_results` are collected,
        the provider runs dry, or the start-index ceiling is passed.

        Any error aborts the whole call; nothing partial is returned.
        """
        results: list[SearchResult] = []
        start = 1

        while len(results) < max_results:
            num = min(self.page_size, max_results - len(results))
            data = await self.fetch_page(query, start, num)

            items = data.get("items") or []
            if not items:
                break

            for item in items:
                if len(results) >= max_results:
                    break
                if not item.get("title"):
                    continue
                results.append(SearchResult(
                    title=item["title"],
                    link=item.get("link"),
                    snippet=item.get("snippet"),
                ))

            start += self.page_size

            total_available = (data.get("searchInformation") or {}).get("totalResults")
            if str(total_available).isdigit() and len(results) >= int(total_available):
                break

            if start > self.max_start_index:
                break

            if len(results) < max_results:
                await asyncio.sleep(self.page_delay)

        logger.info(f"CSE returned {len(results)} results for '{query[:60]}'")
        return results
