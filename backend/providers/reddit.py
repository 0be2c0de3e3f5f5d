from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from .errors import ProviderError

logger = logging.getLogger(__name__)


class Subreddit(BaseModel):
    display_name: str
    subscribers: int = 0
    over18: bool = False
    public_description: str = ""

    @field_validator("subscribers", mode="before")
    @classmethod
    def _none_subscribers(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("over18", mode="before")
    @classmethod
    def _none_over18(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("public_description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value


class RedditPost(BaseModel):
    title: str = ""
    selftext: str = ""
    subreddit: str = ""

    @field_validator("title", "selftext", "subreddit", mode="before")
    @classmethod
    def _none_text(cls, value: Any) -> Any:
        return "" if value is None else value


class _Child(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)


class _ListingData(BaseModel):
    children: list[_Child] = Field(default_factory=list)


class _Listing(BaseModel):
    data: _ListingData = Field(default_factory=_ListingData)


def _children(payload: Any) -> list[dict[str, Any]]:
    try:
        listing = _Listing.model_validate(payload)
    except ValidationError as exc:
        raise ProviderError("reddit", f"unexpected listing shape: {exc}") from exc
    return [child.data for child in listing.data.children]


class RedditClient:
    """Reddit's public JSON search endpoints."""

    def __init__(
        self,
        config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
        http: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._http = http or httpx.Client(
            base_url=config.reddit_base_url,
            headers={"User-Agent": config.reddit_user_agent},
            timeout=config.timeout,
        )

    def _get(self, path: str, params: dict[str, Any]) -> Any:
        response = self._http.get(path, params=params)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError("reddit", f"non-JSON response: {exc}") from exc

    def search_subreddits(self, query: str, limit: int = 20) -> list[Subreddit]:
        payload = self._get("/subreddits/search.json", {"q": query, "limit": limit})
        results: list[Subreddit] = []
        for data in _children(payload):
            try:
                results.append(Subreddit.model_validate(data))
            except ValidationError:
                logger.debug("Skipping malformed subreddit record: %s", data.get("display_name"))
        return results

    def search_posts(self, query: str, limit: int = 10) -> list[RedditPost]:
        payload = self._get(
            "/search.json",
            {"q": query, "type": "link", "sort": "relevance", "t": "all", "limit": limit},
        )
        results: list[RedditPost] = []
        for data in _children(payload):
            try:
                results.append(RedditPost.model_validate(data))
            except ValidationError:
                logger.debug("Skipping malformed post record")
        return results

    def close(self) -> None:
        self._http.close()
