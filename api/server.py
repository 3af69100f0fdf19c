# api/server.py
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse

# --- Logging Import ---
from api.logging_config import setup_logging

# --- App Imports ---
from api.models import (
    ExportPayload, FilterPayload, FilterResponse, HealthResponse, MessageResponse,
    SearchPayload, SearchResponse, SettingsResponse,
)
from src import config
from src.aggregator import search
from src.content_filter import build_filter_backend, build_filter_request, filter_titles
from src.errors import (
    FilterBackendError, FilterBackendUnavailable, ProviderError, ValidationError,
)
from src.exporter import CSV_FILENAME, titles_to_csv

# --- App Setup ---
app = FastAPI(
    title="Search Aggregator API",
    description="Aggregates Google CSE results across date windows and filters titles with Gemini.",
    version="1.0.0"
)

origins = [
    "http://localhost:5173", # Default Vite dev server port
    "http://localhost:3000", # Common React dev server port
    config.FRONTEND_URL,
]

# Remove any duplicates if FRONTEND_URL is a localhost one
origins = list(set(origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# The filter backend is rebuilt whenever GEMINI_API_KEY changes via /api/settings
app.state.filter_backend = build_filter_backend(config.GEMINI_API_KEY)


@app.on_event("startup")
def on_startup():
    setup_logging()
    config.log_env_status()
    logging.info(f"Allowing origins: {origins}")


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


# --- API Endpoints ---

@app.get("/api/health", response_model=HealthResponse)
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/search", response_model=SearchResponse)
async def search_endpoint(payload: SearchPayload):
    try:
        outcome = await search(payload.to_domain())
    except ValidationError as e:
        return _error(400, e.message)
    except ProviderError as e:
        logging.error(f"Search error: {e.message}")
        return _error(500, "Search failed", e.message)

    return SearchResponse(results=outcome.results, total=outcome.total, query=outcome.query)


@app.post("/api/filter", response_model=FilterResponse)
async def filter_endpoint(payload: FilterPayload, request: Request):
    try:
        filter_request = build_filter_request(
            payload.titles,
            dedupe=payload.use_deduplication,
            exclude_disallowed=payload.filter_haram,
        )
        outcome = await filter_titles(filter_request, request.app.state.filter_backend)
    except ValidationError as e:
        return _error(400, e.message)
    except FilterBackendUnavailable as e:
        return _error(500, e.message)
    except FilterBackendError as e:
        logging.error(f"Filter error: {e.message}")
        return _error(500, "Filtering failed", e.message)

    return FilterResponse(
        filtered=outcome.filtered,
        original_count=outcome.original_count,
        filtered_count=outcome.filtered_count,
    )


@app.get("/api/settings", response_model=SettingsResponse)
async def get_settings():
    try:
        return SettingsResponse(settings=config.load_settings())
    except OSError as e:
        logging.error(f"Settings load error: {e}")
        return _error(500, "Failed to load settings")


@app.post("/api/settings", response_model=MessageResponse)
async def save_settings(settings: dict[str, str], request: Request):
    try:
        written = config.save_settings(settings)
    except OSError as e:
        logging.error(f"Settings save error: {e}")
        return _error(500, "Failed to save settings")

    if "GEMINI_API_KEY" in written:
        request.app.state.filter_backend = build_filter_backend(written["GEMINI_API_KEY"])
        if request.app.state.filter_backend is None:
            logging.info("GEMINI_API_KEY cleared; Gemini filter backend disabled.")
        else:
            logging.info("Gemini filter backend rebuilt with the new API key.")

    return MessageResponse(message="Settings saved successfully")


@app.post("/api/export/csv")
async def export_csv(payload: ExportPayload):
    try:
        content = titles_to_csv(payload.results)
    except ValidationError as e:
        return _error(400, e.message)

    return StreamingResponse(
        iter([content]),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )
