"""Shared fakes for the search and filter tests."""

import asyncio
import sys
from pathlib import Path

import httpx
import pytest

# Project root on the path so `src` and `api` import without installation
sys.path.insert(0, str(Path(__file__).parent.parent))

from src import constants
from src.errors import ProviderError
from src.models import SearchCredentials, SearchRequest, SearchResult


def cse_response(items=None, total=None, status_code=200, payload=None) -> httpx.Response:
    """Build a real httpx.Response shaped like a Google CSE reply."""
    if payload is None:
        payload = {}
        if items is not None:
            payload["items"] = items
        if total is not None:
            payload["searchInformation"] = {"totalResults": str(total)}
    return httpx.Response(
        status_code,
        json=payload,
        request=httpx.Request("GET", constants.CSE_ENDPOINT),
    )


def make_items(prefix: str, count: int) -> list[dict]:
    return [
        {"title": f"{prefix} {i}", "link": f"https://example.com/{prefix}/{i}", "snippet": f"snippet {i}"}
        for i in range(count)
    ]


class FakeSearchClient:
    """
    Stands in for CSEClient. `plan` maps a query to either a list of titles or
    an exception; `delays` maps a query to seconds to sleep before answering.
    """

    def __init__(self, plan: dict, delays: dict | None = None):
        self.plan = plan
        self.delays = delays or {}
        self.calls: list[tuple[str, int]] = []
        self.completed: list[str] = []

    async def search(self, query: str, max_results: int) -> list[SearchResult]:
        self.calls.append((query, max_results))
        await asyncio.sleep(self.delays.get(query, 0))
        outcome = self.plan.get(query, [])
        if isinstance(outcome, Exception):
            raise outcome
        self.completed.append(query)
        return [SearchResult(title=t, link=f"https://example.com/{i}") for i, t in enumerate(outcome)][:max_results]


class FakeBackend:
    """Gemini stand-in returning a canned reply and recording prompts."""

    def __init__(self, reply: str = "[]"):
        self.reply = reply
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


@pytest.fixture
def credentials():
    return SearchCredentials(api_key="test-key", search_engine_id="test-cx")


@pytest.fixture
def make_request(credentials):
    def _make(**kwargs) -> SearchRequest:
        kwargs.setdefault("keyword", "chicken soup")
        kwargs.setdefault("credentials", credentials)
        return SearchRequest(**kwargs)
    return _make


@pytest.fixture
def provider_error():
    return ProviderError("Google CSE API error: Daily Limit Exceeded")
