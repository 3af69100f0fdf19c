# src/main.py
import argparse
import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from src import config
from src.aggregator import aggregate, search
from src.content_filter import FilterBackend, build_filter_backend, filter_titles
from src.cse_client import CSEClient
from src.exporter import titles_to_csv
from src.models import FilterRequest, SearchCredentials, SearchRequest, SearchResult
from src.query_builder import preset_window


def restore_results(results: List[SearchResult], titles: List[str]) -> List[SearchResult]:
    """Map surviving titles back to their full records, keeping aggregated order."""
    keep = set(titles)
    return [r for r in results if r.title in keep]


async def execute_search_pipeline(
    search_request: SearchRequest,
    dedupe: bool = False,
    exclude_disallowed: bool = False,
    backend: Optional[FilterBackend] = None,
    client: Optional[CSEClient] = None,
    update_status: Optional[Callable] = None,
) -> Dict[str, Any]:
    """
    Aggregate CSE results across every window, then optionally run the Gemini
    filter over the titles and map the survivors back to full results.
    """
    start_time = time.perf_counter()
    logging.info(f"--- Starting search pipeline for keyword: '{search_request.keyword[:50]}' ---")

    if update_status:
        await update_status(stage="searching", message="Searching Google CSE...")
    if client is None:
        outcome = await search(search_request)
    else:
        outcome = await aggregate(search_request, client)
    logging.info(f"-> Search complete: {outcome.total} unique results.")

    filter_request = FilterRequest(
        titles=[r.title for r in outcome.results],
        dedupe=dedupe,
        exclude_disallowed=exclude_disallowed,
    )
    if filter_request.requested and update_status:
        await update_status(stage="filtering", message="Filtering titles with Gemini...")
    filter_outcome = await filter_titles(filter_request, backend)
    filtered_results = restore_results(outcome.results, filter_outcome.filtered)

    elapsed = time.perf_counter() - start_time
    logging.info(f"--- Search pipeline complete in {elapsed:.2f} seconds "
                 f"({len(filtered_results)}/{outcome.total} results kept) ---")

    return {
        "query": outcome.query,
        "results": outcome.results,
        "filtered_results": filtered_results,
        "total": outcome.total,
        "original_count": filter_outcome.original_count,
        "filtered_count": filter_outcome.filtered_count,
    }


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Search Google CSE across date windows and filter titles.")
    parser.add_argument("keyword")
    parser.add_argument("--dork", default=None, help="Extra query clause, e.g. 'site:example.com'")
    parser.add_argument("--last-days", type=int, action="append", default=[],
                        help="Add a window covering the last N days (repeatable)")
    parser.add_argument("--max-results", type=int, default=None, help="Cap per window")
    parser.add_argument("--dedupe", action="store_true", help="Ask Gemini to remove near duplicates")
    parser.add_argument("--exclude-disallowed", action="store_true",
                        help="Ask Gemini to drop titles with disallowed ingredients")
    parser.add_argument("--csv", default=None, help="Write surviving titles to this CSV file")
    return parser.parse_args(argv)


# This block is for standalone runs from the command line
if __name__ == "__main__":
    from api.logging_config import setup_logging

    setup_logging()
    args = _parse_args()

    request = SearchRequest(
        keyword=args.keyword,
        extra_query_clause=args.dork,
        windows=[preset_window(days) for days in args.last_days],
        max_results_per_window=args.max_results,
        credentials=SearchCredentials(
            api_key=config.GOOGLE_API_KEY or "",
            search_engine_id=config.GOOGLE_CSE_ID or "",
        ),
    )

    async def main():
        result = await execute_search_pipeline(
            request,
            dedupe=args.dedupe,
            exclude_disallowed=args.exclude_disallowed,
            backend=build_filter_backend(config.GEMINI_API_KEY),
        )
        kept = result["filtered_results"]
        print(json.dumps([r.model_dump() for r in kept], indent=2, ensure_ascii=False))
        if args.csv:
            with open(args.csv, "w", encoding="utf-8") as f:
                f.write(titles_to_csv(kept))
            logging.info(f"Wrote {len(kept)} titles to {args.csv}")

    try:
        asyncio.run(main())
    except Exception as e:
        logging.error(f"An error occurred: {e}")
        raise SystemExit(1)
