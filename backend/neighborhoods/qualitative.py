from __future__ import annotations

import logging
import math

from ..llm.groq_client import LLMClient
from ..llm.parsing import ParseFailure, parse_json_object
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import NeighborhoodAggregate, Post

logger = logging.getLogger(__name__)

NO_POSTS_TEXT = "Limited Reddit posts found."

QUALITATIVE_SCORING_PROMPT = """\
Based on Reddit discussions about {city} neighborhoods and the user's preferences ({preferences}),
score these neighborhoods on qualitative match (0-1):

Neighborhoods to score: "{neighborhoods}"

Reddit data:
{posts}

Return as JSON object: {{ "neighborhoodName": 0.85, ... }}
Consider factors like: quiet, clean, safe, friendly, walkable, etc.
Use values between 0 and 1."""

CONCERNS_PROMPT = """\
Based on Reddit discussions about {city} neighborhoods and the user's preferences ({preferences}),
identify specific concerns or potential downsides for these neighborhoods: "{neighborhoods}"

Reddit data:
{posts}

For each neighborhood, list 1-2 legitimate concerns (e.g., high rent, parking issues, long commute, noise, safety concerns, lack of public transit, etc.)

Return as JSON object: {{ "neighborhoodName": ["concern1", "concern2"], ... }}
Only include concerns mentioned in Reddit or that are realistic for the area.
Return empty array if no concerns found."""

LIMITED_AMENITIES = "Limited number of requested amenities nearby"
MISSING_TYPES = "Not all requested amenity types available in this neighborhood"
LIMITED_FEEDBACK = "Limited community feedback available"
NEUTRAL_CONCERN = "Research more on community forums and local resources"


def posts_as_text(posts: list[Post]) -> str:
    return "\n".join(p.render() for p in posts) if posts else NO_POSTS_TEXT


def _neighborhood_list(neighborhoods: list[NeighborhoodAggregate]) -> str:
    return '", "'.join(n.name for n in neighborhoods)


def score_qualitative(
    llm: LLMClient,
    city: str,
    preferences: str,
    neighborhoods: list[NeighborhoodAggregate],
    posts: list[Post],
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> dict[str, float]:
    """Qualitative match in [0, 1] per neighborhood; empty on an unusable answer."""
    if not neighborhoods:
        return {}

    text = llm.complete(
        QUALITATIVE_SCORING_PROMPT.format(
            city=city,
            preferences=preferences,
            neighborhoods=_neighborhood_list(neighborhoods),
            posts=posts_as_text(posts),
        ),
        temperature=config.temperatures["qualitative"],
    )
    parsed = parse_json_object(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not parse qualitative scores (%s)", parsed.reason)
        return {}

    scores: dict[str, float] = {}
    for name, value in parsed.items():
        if isinstance(value, bool):
            continue
        try:
            score = float(value)
        except (TypeError, ValueError):
            continue
        if math.isnan(score):
            continue
        scores[str(name)] = min(1.0, max(0.0, score))
    return scores


def fallback_concerns(
    neighborhood: NeighborhoodAggregate,
    requested_type_count: int,
    posts_scraped: int,
) -> list[str]:
    concerns: list[str] = []
    if neighborhood.total_amenities < 5:
        concerns.append(LIMITED_AMENITIES)
    if neighborhood.amenity_type_count < requested_type_count:
        concerns.append(MISSING_TYPES)
    if posts_scraped == 0:
        concerns.append(LIMITED_FEEDBACK)
    return concerns or [NEUTRAL_CONCERN]


def generate_concerns(
    llm: LLMClient,
    city: str,
    preferences: str,
    neighborhoods: list[NeighborhoodAggregate],
    posts: list[Post],
    requested_type_count: int,
    posts_scraped: int,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> dict[str, list[str]]:
    """Concerns per neighborhood. Every neighborhood gets at least one."""
    if not neighborhoods:
        return {}

    text = llm.complete(
        CONCERNS_PROMPT.format(
            city=city,
            preferences=preferences,
            neighborhoods=_neighborhood_list(neighborhoods),
            posts=posts_as_text(posts),
        ),
        temperature=config.temperatures["concerns"],
    )
    parsed = parse_json_object(text)
    if isinstance(parsed, ParseFailure):
        logger.warning("Could not parse concerns (%s)", parsed.reason)
        parsed = {}

    concerns: dict[str, list[str]] = {}
    for n in neighborhoods:
        raw = parsed.get(n.name)
        listed = [str(c).strip() for c in raw if str(c).strip()] if isinstance(raw, list) else []
        concerns[n.name] = listed or fallback_concerns(n, requested_type_count, posts_scraped)
    return concerns
