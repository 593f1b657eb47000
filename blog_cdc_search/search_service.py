"""Full-text search over posts held in the search index."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from blog_cdc_search.post import Post
from blog_cdc_search.repository import SearchIndexRepository

POSTS_COLLECTION = "posts"
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

_INTEGER = re.compile(r"[+-]?[0-9]+")


class SearchError(Exception):
    """Raised when a search or a search result cannot be processed."""


@dataclass
class SearchParams:
    """What to search for and which page of results to return."""

    query: str = ""
    page: int = 0
    per_page: int = 0
    sort_by: str = ""
    filter_by: str = ""


@dataclass
class SearchResult:
    """A matching post with its relevance score and highlighted fragments."""

    post: Post
    score: float = 0.0
    highlights: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class SearchResponse:
    """A page of search results with pagination details."""

    results: list[SearchResult]
    total: int
    page: int
    per_page: int
    total_pages: int
    query: str


def _number_as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, int):
        return value
    return None


def _moment(value: Any) -> datetime | None:
    seconds = _number_as_int(value)
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, timezone.utc)


def _score(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _highlights(value: Any) -> dict[str, list[str]]:
    if not isinstance(value, dict):
        return {}
    return {
        name: [item for item in fragments if isinstance(item, str)]
        for name, fragments in value.items()
        if isinstance(fragments, list)
    }


class SearchService:
    """Searches and lists posts through a search index."""

    def __init__(self, search_repo: SearchIndexRepository) -> None:
        self.search_repo = search_repo

    def search_posts(self, params: SearchParams) -> SearchResponse:
        """Run a text search; a blank query yields an empty response."""
        if not params.query.strip():
            return SearchResponse(
                results=[],
                total=0,
                page=params.page,
                per_page=params.per_page,
                total_pages=0,
                query=params.query,
            )

        page = params.page if params.page > 0 else 1
        per_page = params.per_page if params.per_page > 0 else DEFAULT_PER_PAGE
        per_page = min(per_page, MAX_PER_PAGE)

        search_params: dict[str, Any] = {
            "page": page,
            "per_page": per_page,
            "sort_by": "_text_match:desc,created_at:desc",
            "query_by": "title,excerpt,body",
        }
        if params.filter_by:
            search_params["filter_by"] = params.filter_by

        try:
            hits = self.search_repo.search_documents(POSTS_COLLECTION, params.query, search_params)
        except Exception as err:
            raise SearchError(f"search failed: {err}") from err

        results = []
        for hit in hits or []:
            if not isinstance(hit, dict):
                continue
            try:
                post = self.extract_post(hit)
            except SearchError:
                continue
            results.append(
                SearchResult(
                    post=post,
                    score=_score(hit.get("_text_match")),
                    highlights=_highlights(hit.get("highlights")),
                )
            )

        total = len(results)
        return SearchResponse(
            results=results,
            total=total,
            page=page,
            per_page=per_page,
            total_pages=-(-total // per_page),
            query=params.query,
        )

    def get_all_posts_from_index(self) -> list[Post]:
        """Return every post in the index, skipping unreadable documents."""
        try:
            documents = self.search_repo.get_all_documents(POSTS_COLLECTION)
        except Exception as err:
            raise SearchError(f"failed to retrieve posts from index: {err}") from err

        posts = []
        for document in documents or []:
            if not isinstance(document, dict):
                continue
            try:
                posts.append(self.extract_post(document))
            except SearchError:
                continue
        return posts

    def extract_post(self, result: dict[str, Any]) -> Post:
        """Build a post from an index document; raises SearchError on a bad id."""
        if "id" not in result:
            raise SearchError("missing post ID")
        raw_id = result["id"]
        if isinstance(raw_id, str):
            if not _INTEGER.fullmatch(raw_id):
                raise SearchError(f"invalid post ID format: {raw_id}")
            post_id = int(raw_id)
        else:
            number = _number_as_int(raw_id)
            if number is None:
                raise SearchError("invalid post ID type")
            post_id = number

        def text(key: str) -> str:
            value = result.get(key)
            return value if isinstance(value, str) else ""

        return Post(
            id=post_id,
            title=text("title"),
            image=text("image"),
            excerpt=text("excerpt"),
            body=text("body"),
            created_at=_moment(result.get("created_at")),
            updated_at=_moment(result.get("updated_at")),
        )