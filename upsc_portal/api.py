from __future__ import annotations

"""
FastAPI application for the UPSC prep portal.

- Catalog is loaded once at startup and never replaced
- Search returns at most SEARCH_RESULT_CAP items in catalog scan order
- View counts live in process memory only
- Unknown slugs/years answer 404 with an ``{"error": ...}`` body
"""

import threading
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .catalog import CatalogStore, NotFound, load_catalog
from .config import (
    ExamYear,
    HealthResponse,
    Subject,
    Topic,
    ViewCountResponse,
)
from .search import SearchResult, search_catalog
from .views import ViewCounter

# =============================================================================
# FastAPI app + startup
# =============================================================================

app = FastAPI(title="UPSC Prep Portal")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

_catalog: CatalogStore | None = None
_views = ViewCounter()
_catalog_lock = threading.Lock()


@app.on_event("startup")
def startup_event() -> None:
    logger.info("Starting portal...")
    logger.info("Startup complete: {!r}", get_catalog())


def get_catalog() -> CatalogStore:
    global _catalog
    if _catalog is None:
        # sync routes run in a threadpool; load exactly once
        with _catalog_lock:
            if _catalog is None:
                _catalog = load_catalog()
    return _catalog


def get_views() -> ViewCounter:
    return _views


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


# =============================================================================
# Routes
# =============================================================================

@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    catalog = get_catalog()
    return HealthResponse(
        status="healthy",
        subjects=len(catalog.subjects()),
        previous_years=len(catalog.previous_years()),
    )


@app.get("/api/subjects", response_model=List[Subject])
def list_subjects():
    return list(get_catalog().subjects())


@app.get("/api/subjects/{slug}/topics", response_model=List[Topic])
def subject_topics(slug: str):
    try:
        subject = get_catalog().subject_by_slug(slug)
    except NotFound as e:
        logger.info("{}", e)
        return _not_found("Subject not found")
    return list(subject.topics)


@app.get("/api/previous-years", response_model=List[ExamYear])
def list_previous_years():
    return list(get_catalog().previous_years())


@app.get("/api/previous-years/{year}", response_model=ExamYear)
def previous_year(year: str):
    try:
        return get_catalog().year_by_number(year)
    except NotFound as e:
        logger.info("{}", e)
        return _not_found("Year not found")


@app.get("/api/search", response_model=List[SearchResult])
def search(q: str = ""):
    return search_catalog(get_catalog(), q)


@app.post("/api/views/{item_id:path}", response_model=ViewCountResponse)
def record_view(item_id: str) -> ViewCountResponse:
    return ViewCountResponse(views=get_views().record(item_id))


@app.get("/api/views/{item_id:path}", response_model=ViewCountResponse)
def get_view_count(item_id: str) -> ViewCountResponse:
    return ViewCountResponse(views=get_views().get(item_id))
