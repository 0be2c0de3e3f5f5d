from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PipelineConfig:
    top_n: int = 5
    display_limit: int = 10
    neighborhood_place_cap: int = 5
    excerpt_chars: int = 300
    posts_per_query: int = 10
    subreddit_search_limit: int = 20
    min_subscribers: int = 100
    description_vocabulary: tuple[str, ...] = ("neighborhood", "live", "ask")
    default_forum: str = "AskReddit"
    default_amenities: tuple[str, ...] = ("gym", "grocery_or_supermarket")
    default_keywords: tuple[str, ...] = ("neighborhood", "living", "area")
    placeholder_neighborhood: str = "Downtown"
    temperatures: dict[str, float] = field(default_factory=lambda: {
        "keywords": 0.7,
        "queries": 0.7,
        "amenities": 0.5,
        "relevance": 0.5,
        "neighborhoods": 0.5,
        "qualitative": 0.7,
        "concerns": 0.7,
    })


DEFAULT_PIPELINE_CONFIG = PipelineConfig()
