from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

VARIETY_BONUS = 5


class AmenityType(str, Enum):
    gym = "gym"
    grocery_or_supermarket = "grocery_or_supermarket"
    transit_station = "transit_station"
    restaurant = "restaurant"
    park = "park"
    hospital = "hospital"
    library = "library"
    school = "school"
    shopping_mall = "shopping_mall"
    pharmacy = "pharmacy"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Request bodies ───────────────────────────────────────────────────────
# Fields are optional so that missing values reach the handler and
# produce a 400 instead of FastAPI's 422.


class RecommendationRequest(BaseModel):
    city: str | None = None
    preferences: str | None = None


class ScrapeRequest(BaseModel):
    # Any JSON array is accepted; items are searched as text
    queries: list[Any] | None = None

    def query_texts(self) -> list[str]:
        return [q if isinstance(q, str) else str(q) for q in self.queries or []]


# ── Pipeline values ──────────────────────────────────────────────────────


class Post(CamelModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body_excerpt: str
    source_forum: str

    def render(self) -> str:
        return f"Title: {self.title}\nContent: {self.body_excerpt}\nSubreddit: r/{self.source_forum}"


class RelevanceVerdict(CamelModel):
    post_index: int
    is_relevant: bool = False
    reason: str = ""


class AmenityRequest(CamelModel):
    type: AmenityType
    specific_names: list[str] = Field(default_factory=list)


class Place(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    lat: float
    lng: float
    type: AmenityType


@dataclass
class NeighborhoodAggregate:
    """Per-neighborhood amenity tally; the score is always derived from the counts."""

    name: str
    amenity_counts: dict[str, int] = field(default_factory=dict)
    places: dict[str, list[Place]] = field(default_factory=dict)

    def add(self, place: Place) -> None:
        key = place.type.value
        self.amenity_counts[key] = self.amenity_counts.get(key, 0) + 1
        self.places.setdefault(key, []).append(place)

    @property
    def total_amenities(self) -> int:
        return sum(self.amenity_counts.values())

    @property
    def amenity_type_count(self) -> int:
        return sum(1 for count in self.amenity_counts.values() if count > 0)

    @property
    def amenity_score(self) -> int:
        return self.total_amenities + VARIETY_BONUS * self.amenity_type_count


# ── Response ─────────────────────────────────────────────────────────────


class RankedNeighborhood(CamelModel):
    neighborhood: str
    match_reasons: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    amenity_breakdown: dict[str, int] = Field(default_factory=dict)
    qualitative_score: float | None = Field(default=None, ge=0.0, le=1.0)


class Recommendations(CamelModel):
    recommendations: list[RankedNeighborhood] = Field(default_factory=list)
    summary: str | None = None


class CityCoordinates(BaseModel):
    lat: float
    lng: float


class MapData(CamelModel):
    city_coordinates: CityCoordinates | None = None
    amenities: dict[str, list[Place]] = Field(default_factory=dict)
    neighborhood_amenities: dict[str, dict[str, list[Place]]] = Field(default_factory=dict)


class RecommendationResponse(CamelModel):
    city: str
    user_preferences: str
    recommendations: Recommendations
    map_data: MapData


class ScrapeResponse(CamelModel):
    queries_count: int
    posts_scraped: int
    posts: list[Post]


class DebugTrace(CamelModel):
    city: str
    preferences: str
    parsed_preferences: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    reddit_queries: list[str] = Field(default_factory=list)
    subreddits_discovered: list[str] = Field(default_factory=list)
    all_posts_scraped: list[Post] = Field(default_factory=list)
    filtered_posts: list[Post] = Field(default_factory=list)
    total_scraped: int = 0
    total_kept: int = 0
