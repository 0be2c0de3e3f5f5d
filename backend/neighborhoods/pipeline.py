"""
Recommendation pipeline.

Two ranking strategies sit behind one interface:

* **Amenity-first**: used when the preferences name amenities. Every
  matching place in the city is located and attributed to a neighborhood;
  neighborhoods are ranked by ``total + 5 × distinct types``.
* **Post-text-first**: used when the preferences are purely qualitative.
  The model names neighborhoods straight from the filtered Reddit posts.

Qualitative post data is gathered before either strategy runs, because
both the post-text strategy and the concern/score prompts depend on it.
When a strategy finds nothing, the result degrades to a single
placeholder neighborhood rather than an empty answer.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..llm.groq_client import LLMClient
from ..providers.config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from ..providers.maps import MapsClient
from ..providers.reddit import RedditClient
from .amenities import AmenityLocator
from .assembler import assemble_response, build_map_data
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .extraction import (
    extract_amenities,
    extract_neighborhood_names,
    extract_qualitative_queries,
    extract_search_queries,
    identify_keywords,
)
from .forums import discover_forums, scrape_posts
from .models import (
    AmenityRequest,
    DebugTrace,
    NeighborhoodAggregate,
    Post,
    RecommendationResponse,
    ScrapeResponse,
)
from .qualitative import generate_concerns, score_qualitative
from .relevance import filter_relevant_posts
from .scoring import score_neighborhoods

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    llm: LLMClient
    reddit: RedditClient
    maps: MapsClient
    provider_config: ProviderConfig = DEFAULT_PROVIDER_CONFIG


@dataclass
class RankingContext:
    collaborators: Collaborators
    city: str
    preferences: str
    amenities: list[AmenityRequest]
    locator: AmenityLocator
    posts: list[Post] = field(default_factory=list)
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG


class RecommendationStrategy(ABC):
    name: str

    @abstractmethod
    def rank(self, ctx: RankingContext) -> list[NeighborhoodAggregate]:
        ...


class PostTextFirstStrategy(RecommendationStrategy):
    name = "post_text_first"

    def rank(self, ctx: RankingContext) -> list[NeighborhoodAggregate]:
        logger.info("Using Reddit posts to find neighborhoods in %s", ctx.city)
        names = extract_neighborhood_names(ctx.collaborators.llm, ctx.posts, ctx.city, ctx.config)
        if not names:
            logger.warning("No neighborhoods named in posts, using %s", ctx.config.placeholder_neighborhood)
            names = [ctx.config.placeholder_neighborhood]
        return [NeighborhoodAggregate(name=name) for name in names]


class AmenityFirstStrategy(RecommendationStrategy):
    name = "amenity_first"

    def rank(self, ctx: RankingContext) -> list[NeighborhoodAggregate]:
        ranked = score_neighborhoods(ctx.locator, ctx.city, ctx.amenities)
        if ranked:
            return ranked
        logger.warning("No neighborhoods found with requested amenities in %s, falling back to posts", ctx.city)
        return PostTextFirstStrategy().rank(ctx)


def select_strategy(amenities: list[AmenityRequest]) -> RecommendationStrategy:
    return AmenityFirstStrategy() if amenities else PostTextFirstStrategy()


def recommend(
    collaborators: Collaborators,
    city: str,
    preferences: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> RecommendationResponse:
    start_time = time.time()
    llm = collaborators.llm

    # 1. What the preferences ask for
    amenities = extract_amenities(llm, preferences, city, config)

    # 2. Qualitative community data
    queries = extract_qualitative_queries(llm, preferences, city, config)
    scraped = scrape_posts(collaborators.reddit, queries, city=city, config=config)
    filtered = filter_relevant_posts(llm, scraped.posts, preferences, config)

    # 3. Rank neighborhoods
    ctx = RankingContext(
        collaborators=collaborators,
        city=city,
        preferences=preferences,
        amenities=amenities,
        locator=AmenityLocator(collaborators.maps, collaborators.provider_config),
        posts=filtered,
        config=config,
    )
    strategy = select_strategy(amenities)
    top = strategy.rank(ctx)[:config.top_n]

    # 4. Qualitative scores and concerns for the top neighborhoods
    scores = score_qualitative(llm, city, preferences, top, filtered, config)
    concerns = generate_concerns(
        llm, city, preferences, top, filtered,
        requested_type_count=len(amenities),
        posts_scraped=scraped.total,
        config=config,
    )

    # 5. Map data and response
    map_data = build_map_data(ctx.locator, city, amenities, top, config)
    response = assemble_response(
        city, preferences, top, amenities, concerns, scores,
        posts_scraped=scraped.total,
        map_data=map_data,
        config=config,
    )

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info(
        "Recommended %d neighborhoods for %s via %s in %.1f ms",
        len(response.recommendations.recommendations), city, strategy.name, elapsed_ms,
    )
    return response


def debug_trace(
    collaborators: Collaborators,
    city: str,
    preferences: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> DebugTrace:
    """Every intermediate step of query-mode retrieval, for inspection."""
    llm = collaborators.llm
    plan = extract_search_queries(llm, preferences, city, config)
    keywords = identify_keywords(llm, preferences, config)

    forums = discover_forums(collaborators.reddit, city, config)
    scraped = scrape_posts(collaborators.reddit, plan.queries, city=city, forums=forums, config=config)
    filtered = filter_relevant_posts(llm, scraped.posts, preferences, config)

    return DebugTrace(
        city=city,
        preferences=preferences,
        parsed_preferences=plan.preferences,
        keywords=keywords,
        reddit_queries=plan.queries,
        subreddits_discovered=forums,
        all_posts_scraped=scraped.posts,
        filtered_posts=filtered,
        total_scraped=scraped.total,
        total_kept=len(filtered),
    )


def run_test_scrape(
    collaborators: Collaborators,
    queries: list[str],
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> ScrapeResponse:
    scraped = scrape_posts(collaborators.reddit, queries, config=config)
    return ScrapeResponse(
        queries_count=len(queries),
        posts_scraped=scraped.total,
        posts=scraped.posts,
    )
