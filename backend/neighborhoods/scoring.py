from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Iterable

from .amenities import AmenityLocator, resolve_neighborhood
from .models import AmenityRequest, NeighborhoodAggregate, Place

logger = logging.getLogger(__name__)


def aggregate_places(
    attributed: Iterable[tuple[str | None, Place]],
) -> dict[str, NeighborhoodAggregate]:
    """Bucket (neighborhood, place) pairs; unattributed places are dropped."""
    buckets: dict[str, NeighborhoodAggregate] = {}
    for neighborhood, place in attributed:
        if not neighborhood:
            continue
        bucket = buckets.get(neighborhood)
        if bucket is None:
            bucket = buckets[neighborhood] = NeighborhoodAggregate(name=neighborhood)
        bucket.add(place)
    return buckets


def rank_neighborhoods(buckets: dict[str, NeighborhoodAggregate]) -> list[NeighborhoodAggregate]:
    # sorted() is stable, so ties keep first-seen order
    return sorted(buckets.values(), key=lambda n: n.amenity_score, reverse=True)


def score_neighborhoods(
    locator: AmenityLocator,
    city: str,
    amenities: list[AmenityRequest],
    resolve: Callable[[float, float], str | None] | None = None,
) -> list[NeighborhoodAggregate]:
    """Locate every requested amenity, attribute each to a neighborhood and rank.

    Score per neighborhood is total amenities plus a bonus for each distinct
    amenity type present.
    """
    resolve = resolve or partial(resolve_neighborhood, locator.maps)

    attributed: list[tuple[str | None, Place]] = []
    for amenity in amenities:
        label = f" ({', '.join(amenity.specific_names)})" if amenity.specific_names else ""
        logger.info("Finding all %s in %s%s", amenity.type.value, city, label)
        places = locator.locate(city, amenity.type, amenity.specific_names)
        logger.info("Found %d %s locations", len(places), amenity.type.value)
        for place in places:
            attributed.append((resolve(place.lat, place.lng), place))

    ranked = rank_neighborhoods(aggregate_places(attributed))

    logger.info("Identified %d neighborhoods with amenities", len(ranked))
    for i, n in enumerate(ranked[:5], start=1):
        logger.info("  %d. %s: %d amenities (%d types)", i, n.name, n.total_amenities, n.amenity_type_count)
    return ranked
