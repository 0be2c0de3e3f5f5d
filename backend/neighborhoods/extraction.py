from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..llm.groq_client import LLMClient
from ..llm.parsing import ParseFailure, parse_json_list, parse_json_object
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import AmenityRequest, AmenityType, Post

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# LLM Prompts
# ---------------------------------------------------------------------------

KEYWORDS_PROMPT = """\
Extract the key characteristics/keywords from these preferences: "{preferences}"

Return as JSON array of keywords:
["keyword1", "keyword2", ...]

Examples: "close to gyms" -> ["gyms", "fitness", "exercise"]
"safe neighborhoods" -> ["safe", "safety", "crime"]
"quiet area" -> ["quiet", "peaceful", "noise"]"""

SEARCH_QUERIES_PROMPT = """\
The user wants to stay in {city} with these preferences: "{preferences}"

Extract the key preferences and suggest NEIGHBORHOOD-FOCUSED Reddit search queries.
Focus on finding neighborhood recommendations, living conditions, and area-specific discussions.
Avoid queries that are too specific about brands or services.

Return as JSON with this format:
{{
  "preferences": ["preference1", "preference2", ...],
  "redditQueries": ["search query 1 (neighborhood focused)", "search query 2 (neighborhood focused)", ...]
}}"""

QUALITATIVE_QUERIES_PROMPT = """\
The user wants to stay in {city} with these preferences: "{preferences}"

Generate Reddit search queries focused on QUALITATIVE aspects (quiet, clean, safe, etc).
Ignore amenity-specific queries - those are handled separately.

Return as JSON array like: ["quiet neighborhoods {city}", "safest neighborhoods {city}"]"""

AMENITY_EXTRACTION_PROMPT = """\
From these user preferences: "{preferences}"
The user is looking for a place to live in {city}.

Extract both:
1. The TYPES of amenities (gym, grocery, etc.)
2. The SPECIFIC BRANDS/NAMES if mentioned (e.g., "Crunch Fitness", "Whole Foods", "BART")

Return as JSON:
{{
  "amenities": [
    {{"type": "gym", "specificNames": ["Crunch Fitness", "Planet Fitness"]}},
    {{"type": "grocery_or_supermarket", "specificNames": ["Whole Foods"]}}
  ]
}}

Type mappings:
- gym/fitness/crunch/peloton/la fitness -> "gym"
- grocery/supermarket/whole foods/trader joe -> "grocery_or_supermarket"
- transit/metro/muni/bart/bus -> "transit_station"
- restaurant/food/cafe/coffee -> "restaurant"
- park/outdoor/nature -> "park"
- hospital/doctor/medical -> "hospital"
- library -> "library"
- school -> "school"
- shopping/mall -> "shopping_mall"
- pharmacy -> "pharmacy"

Only include amenities they actually mentioned or implied.
Only include specific names that are mentioned or clearly implied.
If no specific names mentioned, use empty array for specificNames."""

NEIGHBORHOOD_NAMES_PROMPT = """\
From these Reddit posts about {city}, extract the names of neighborhoods/areas mentioned:

{posts}

Return as JSON array of neighborhood names: ["neighborhood1", "neighborhood2", ...]
Only include specific neighborhood names, not generic terms."""


@dataclass
class QueryPlan:
    preferences: list[str] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)


def default_queries(city: str) -> list[str]:
    return [f"neighborhoods in {city}", f"best places to live in {city}"]


def _strings(items: list) -> list[str]:
    return [str(item).strip() for item in items if isinstance(item, (str, int, float)) and str(item).strip()]


# ---------------------------------------------------------------------------
# Keyword / query mode
# ---------------------------------------------------------------------------


def identify_keywords(
    llm: LLMClient,
    preferences: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[str]:
    text = llm.complete(KEYWORDS_PROMPT.format(preferences=preferences), temperature=config.temperatures["keywords"])
    parsed = parse_json_list(text)
    if isinstance(parsed, ParseFailure) or not _strings(parsed):
        return list(config.default_keywords)
    return _strings(parsed)


def extract_search_queries(
    llm: LLMClient,
    preferences: str,
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> QueryPlan:
    """Neighborhood-focused search queries plus the preference phrases they came from."""
    text = llm.complete(
        SEARCH_QUERIES_PROMPT.format(city=city, preferences=preferences),
        temperature=config.temperatures["queries"],
    )
    parsed = parse_json_object(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not parse search queries (%s), using defaults", parsed.reason)
        return QueryPlan(queries=default_queries(city))

    queries = _strings(parsed.get("redditQueries") or [])
    return QueryPlan(
        preferences=_strings(parsed.get("preferences") or []),
        queries=queries or default_queries(city),
    )


def extract_qualitative_queries(
    llm: LLMClient,
    preferences: str,
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[str]:
    text = llm.complete(
        QUALITATIVE_QUERIES_PROMPT.format(city=city, preferences=preferences),
        temperature=config.temperatures["queries"],
    )
    parsed = parse_json_list(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not parse qualitative queries (%s), using defaults", parsed.reason)
        return default_queries(city)
    return _strings(parsed) or default_queries(city)


# ---------------------------------------------------------------------------
# Amenity mode
# ---------------------------------------------------------------------------


def default_amenities(config: PipelineConfig = DEFAULT_PIPELINE_CONFIG) -> list[AmenityRequest]:
    return [AmenityRequest(type=AmenityType(t)) for t in config.default_amenities]


def _merge_amenities(items: list) -> list[AmenityRequest]:
    merged: dict[AmenityType, list[str]] = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            amenity_type = AmenityType(str(item.get("type", "")).strip())
        except ValueError:
            logger.info("Dropping unknown amenity type %r", item.get("type"))
            continue
        names = merged.setdefault(amenity_type, [])
        for name in _strings(item.get("specificNames") or []):
            if name not in names:
                names.append(name)
    return [AmenityRequest(type=t, specific_names=names) for t, names in merged.items()]


def extract_amenities(
    llm: LLMClient,
    preferences: str,
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[AmenityRequest]:
    """Amenity types (and any named brands) the preferences ask for.

    An empty list means the preferences are purely qualitative. An
    unparsable answer yields the default amenity set.
    """
    text = llm.complete(
        AMENITY_EXTRACTION_PROMPT.format(city=city, preferences=preferences),
        temperature=config.temperatures["amenities"],
    )
    parsed = parse_json_object(text)
    if isinstance(parsed, ParseFailure) or not isinstance(parsed.get("amenities"), list):
        logger.warning("Could not parse amenities, using defaults")
        return default_amenities(config)

    amenities = _merge_amenities(parsed["amenities"])
    logger.info(
        "Extracted amenities: %s",
        ", ".join(a.type.value for a in amenities) or "none (qualitative search)",
    )
    return amenities


# ---------------------------------------------------------------------------
# Post-text mode
# ---------------------------------------------------------------------------


def extract_neighborhood_names(
    llm: LLMClient,
    posts: list[Post],
    city: str,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> list[str]:
    """Neighborhood names mentioned in *posts*; empty when nothing usable comes back."""
    if not posts:
        return []

    text = llm.complete(
        NEIGHBORHOOD_NAMES_PROMPT.format(city=city, posts="\n".join(p.render() for p in posts)),
        temperature=config.temperatures["neighborhoods"],
    )
    parsed = parse_json_list(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not extract neighborhoods from posts (%s)", parsed.reason)
        return []

    names: list[str] = []
    for name in _strings(parsed):
        if name not in names:
            names.append(name)
    return names
