from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from ..providers.errors import ProviderError
from ..providers.reddit import RedditClient, Subreddit
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import Post

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    posts: list[Post] = field(default_factory=list)
    forums: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.posts)


def fallback_forums(city: str) -> list[str]:
    city_lower = city.lower()
    return [city_lower, f"{city_lower}housing", f"Ask{city}", f"{city_lower}neighborhoods"]


def _ultimate_fallback(city: str) -> list[str]:
    return [city.lower(), f"Ask{city}"]


def is_relevant_forum(
    subreddit: Subreddit,
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> bool:
    if subreddit.subscribers <= config.min_subscribers or subreddit.over18:
        return False
    if city.lower() in subreddit.display_name.lower():
        return True
    description = subreddit.public_description.lower()
    return any(word in description for word in config.description_vocabulary)


def discover_forums(
    reddit: RedditClient,
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[str]:
    """Find subreddits worth searching for *city*.

    Falls back to generated name patterns when the search matches nothing,
    and to a shorter list when the search itself fails. Never raises.
    """
    try:
        candidates = reddit.search_subreddits(city, limit=config.subreddit_search_limit)
    except (httpx.HTTPError, ProviderError):
        fallback = _ultimate_fallback(city)
        logger.warning("Subreddit discovery failed for %s, using %s", city, fallback, exc_info=True)
        return fallback

    forums = [s.display_name for s in candidates if is_relevant_forum(s, city, config)]
    if forums:
        logger.info("Found %d relevant subreddits for %s: %s", len(forums), city, ", ".join(forums))
        return forums

    fallback = fallback_forums(city)
    logger.info("No subreddits matched %s, using fallback: %s", city, ", ".join(fallback))
    return fallback


def build_search_query(query: str, forums: list[str]) -> str:
    restriction = " OR ".join(f"subreddit:{forum}" for forum in forums)
    return f"{query} {restriction}" if restriction else query


def scrape_posts(
    reddit: RedditClient,
    queries: list[str],
    city: str | None = None,
    forums: list[str] | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> ScrapeResult:
    """Search each query within the given (or discovered) subreddits.

    Posts need both a title and a body; bodies are cut to the excerpt length.
    A failing query is logged and skipped.
    """
    if not forums and city:
        forums = discover_forums(reddit, city, config)
    if not forums:
        forums = [config.default_forum]

    result = ScrapeResult(forums=list(forums))
    for query in queries:
        try:
            found = reddit.search_posts(build_search_query(query, forums), limit=config.posts_per_query)
        except (httpx.HTTPError, ProviderError):
            logger.warning("Scraping query %r failed, skipping", query, exc_info=True)
            continue

        kept = 0
        for item in found:
            if not item.title or not item.selftext:
                continue
            result.posts.append(Post(
                title=item.title,
                body_excerpt=item.selftext[:config.excerpt_chars],
                source_forum=item.subreddit,
            ))
            kept += 1
        logger.info("Found %d posts for %r", kept, query)

    logger.info("Total posts scraped: %d", result.total)
    return result
