#!/usr/bin/env python3
"""
server.py — Periodical content server.

Routes:
  GET  /api/current_issue_number        → pointer to the live issue
  GET  /api/current_issue               → articles of the live issue
  GET  /api/current_connections         → connections puzzle of the live issue
  GET  /api/current_crossword           → crossword of the live issue
  GET  /api/issues                      → available issue numbers
  GET  /api/issues/{n}/{document}       → articles | connections | crossword of issue n
  GET  /api/recent_articles             → recency-weighted shuffle of all articles (top 20)
  GET  /api/recent/{category}           → same, for one section (e.g. sports)
  GET  /api/search/{terms}              → substring search across all issues
  GET  /api/images/{name}?width=500     → resized image
  GET  /api/status                      → health check

Usage (local):
  python server.py
  Open: http://localhost:3001/api/current_issue

Environment:
  DATA_DIR=/path/to/data   (default ./data)
  PORT=3001
"""
import logging
import re
import time
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

import config
import content
import images
import ranking

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class IssueNumberResponse(BaseModel):
    currentIssueNumber: int


class IssueListResponse(BaseModel):
    issues: List[int]


class StatusResponse(BaseModel):
    status: str
    currentIssueNumber: int
    issues: int


def _load_or_error(load: Callable[[], Any], missing: str) -> Any:
    """Run a content read, translating store errors into HTTP errors."""
    try:
        return load()
    except content.ContentNotFound:
        raise HTTPException(status_code=404, detail=missing)
    except content.ContentError as e:
        logger.error(f"Content read failed: {e}")
        raise HTTPException(status_code=500, detail="Server error")


def _parse_width(raw: Optional[str]) -> int:
    """Leading integer of the query value ("300px" → 300), else the default width."""
    match = LEADING_INT.match(raw or "")
    if not match:
        return config.DEFAULT_IMAGE_WIDTH
    width = int(match.group(1))
    if width <= 0:
        raise HTTPException(status_code=400, detail="Width must be a positive integer")
    if width > config.MAX_IMAGE_WIDTH:
        raise HTTPException(status_code=400, detail=f"Width must not exceed {config.MAX_IMAGE_WIDTH}")
    return width


def _recent(store: content.ContentStore, category: Optional[str], limit: int) -> List[Any]:
    missing = f"No articles found for '{category}'" if category else "No articles found"
    articles = _load_or_error(lambda: store.load_collection(category), missing)
    ranked = ranking.shuffle_with_recency_preference(
        articles, key=lambda art: content.parse_date(art["date"])
    )
    return ranked[:limit]


def create_app(store: content.ContentStore, recent_limit: int = config.RECENT_LIMIT) -> FastAPI:
    app = FastAPI(title="Periodical Content", docs_url=None, redoc_url=None)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        client = request.client.host if request.client else "-"
        logger.info(
            f'{client} "{request.method} {request.url.path}" {response.status_code} {elapsed_ms:.1f}ms'
        )
        return response

    # ---- Current issue ----

    @app.get("/api/current_issue_number", response_model=IssueNumberResponse)
    def get_current_issue_number():
        return {"currentIssueNumber": store.current_issue_number}

    @app.get("/api/current_issue")
    def get_current_issue():
        return _load_or_error(lambda: store.load_current("articles"), "Issues file not found")

    @app.get("/api/current_connections")
    def get_current_connections():
        return _load_or_error(lambda: store.load_current("connections"), "Connections file not found")

    @app.get("/api/current_crossword")
    def get_current_crossword():
        return _load_or_error(lambda: store.load_current("crossword"), "Crosswords file not found")

    # ---- Archive ----

    @app.get("/api/issues", response_model=IssueListResponse)
    def get_issues():
        return {"issues": store.issue_numbers()}

    @app.get("/api/issues/{issue_number}/{document}")
    def get_issue_document(issue_number: int, document: str):
        return _load_or_error(
            lambda: store.load_issue_document(issue_number, document),
            f"Issue {issue_number} has no {document}",
        )

    # ---- Recent feeds ----

    @app.get("/api/recent_articles")
    def get_recent_articles():
        return _recent(store, None, recent_limit)

    @app.get("/api/recent/{category}")
    def get_recent_category(category: str):
        return _recent(store, category, recent_limit)

    # ---- Search ----

    @app.get("/api/search/{search_terms}")
    def search(search_terms: str):
        articles = _load_or_error(store.all_articles, "No articles found")
        return content.search_articles(articles, search_terms)

    # ---- Images ----

    @app.get("/api/images/{image_name}")
    def get_image(image_name: str, width: Optional[str] = Query(None)):
        size = _parse_width(width)
        path = _load_or_error(lambda: store.image_path(image_name), "Image not found")
        try:
            data = images.resize(path, size)
        except images.ImageError as e:
            logger.error(f"Image resize failed: {e}")
            raise HTTPException(status_code=500, detail="Server error")
        return Response(content=data, media_type=images.media_type(image_name))

    # ---- Status ----

    @app.get("/api/status", response_model=StatusResponse)
    def get_status():
        return {
            "status": "ok",
            "currentIssueNumber": store.current_issue_number,
            "issues": len(store.issue_numbers()),
        }

    return app


store = content.ContentStore(config.DATA_DIR, default_issue_number=config.DEFAULT_ISSUE_NUMBER)
app = create_app(store)


if __name__ == "__main__":
    logger.info(f"Serving content from {config.DATA_DIR} on port {config.PORT}")
    uvicorn.run("server:app", host="0.0.0.0", port=config.PORT, reload=False)
