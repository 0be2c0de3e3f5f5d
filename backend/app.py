from __future__ import annotations

import logging
import os
import threading

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .llm.groq_client import LLMClient
from .neighborhoods.models import (
    DebugTrace,
    RecommendationRequest,
    RecommendationResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from .neighborhoods.pipeline import Collaborators, debug_trace, recommend, run_test_scrape
from .providers.maps import MapsClient
from .providers.reddit import RedditClient

logger = logging.getLogger(__name__)

app = FastAPI(title="Neighborhood Finder API", version="1.0.0")

_collaborators: Collaborators | None = None
_collaborators_lock = threading.Lock()


def get_collaborators() -> Collaborators:
    """Shared provider handles, created on first use. They hold no request state."""
    global _collaborators
    with _collaborators_lock:
        if _collaborators is None:
            _collaborators = Collaborators(
                llm=LLMClient(),
                reddit=RedditClient(),
                maps=MapsClient(),
            )
    return _collaborators


# ── Error responses ──────────────────────────────────────────────────────


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


def _require_city_and_preferences(body: RecommendationRequest) -> tuple[str, str]:
    if not body.city or not body.preferences:
        raise HTTPException(status_code=400, detail="City and preferences are required")
    return body.city, body.preferences


# ── Endpoints ────────────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "Server is running"}


@app.post("/api/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    collaborators: Collaborators = Depends(get_collaborators),
) -> RecommendationResponse:
    city, preferences = _require_city_and_preferences(body)
    logger.info("New request: city=%s preferences=%r", city, preferences)
    return recommend(collaborators, city, preferences)


@app.post("/api/test-scrape", response_model=ScrapeResponse)
def test_scrape(
    body: ScrapeRequest,
    collaborators: Collaborators = Depends(get_collaborators),
) -> ScrapeResponse:
    if body.queries is None:
        raise HTTPException(status_code=400, detail="Queries array is required")
    queries = body.query_texts()
    logger.info("Test scrape for queries: %s", queries)
    return run_test_scrape(collaborators, queries)


@app.post("/api/debug-recommendations", response_model=DebugTrace)
def debug_recommendations(
    body: RecommendationRequest,
    collaborators: Collaborators = Depends(get_collaborators),
) -> DebugTrace:
    city, preferences = _require_city_and_preferences(body)
    logger.info("Debug trace: city=%s preferences=%r", city, preferences)
    return debug_trace(collaborators, city, preferences)


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "5000")))
