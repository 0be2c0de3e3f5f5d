from __future__ import annotations

from .amenities import AmenityLocator, geocode_city
from .config import DEFAULT_PIPELINE_CONFIG, PipelineConfig
from .models import (
    AmenityRequest,
    CityCoordinates,
    MapData,
    NeighborhoodAggregate,
    Place,
    RankedNeighborhood,
    RecommendationResponse,
    Recommendations,
)


def match_reasons(
    neighborhood: NeighborhoodAggregate,
    requested_type_count: int,
    posts_scraped: int,
) -> list[str]:
    reasons: list[str] = []
    if neighborhood.total_amenities > 0:
        noun = "amenities" if requested_type_count > 1 else "amenity"
        reasons.append(f"{neighborhood.total_amenities} {noun} nearby")
    if neighborhood.amenity_type_count > 0:
        reasons.append(f"{neighborhood.amenity_type_count} types of amenities")
    if posts_scraped > 0:
        reasons.append("Well-reviewed on community forums")
    return reasons or ["Strong neighborhood match"]


def build_map_data(
    locator: AmenityLocator,
    city: str,
    amenities: list[AmenityRequest],
    neighborhoods: list[NeighborhoodAggregate],
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> MapData:
    """City center, a display listing per amenity type and each neighborhood's own places."""
    center = geocode_city(locator.maps, city)

    listings: dict[str, list[Place]] = {}
    for amenity in amenities:
        listings[amenity.type.value] = locator.locate(
            city,
            amenity.type,
            amenity.specific_names,
            limit=config.display_limit,
            paginate=False,
        )

    per_neighborhood: dict[str, dict[str, list[Place]]] = {}
    for n in neighborhoods:
        per_neighborhood[n.name] = {
            amenity.type.value: n.places.get(amenity.type.value, [])[:config.neighborhood_place_cap]
            for amenity in amenities
        }

    return MapData(
        city_coordinates=CityCoordinates(lat=center.lat, lng=center.lng) if center else None,
        amenities=listings,
        neighborhood_amenities=per_neighborhood,
    )


def assemble_response(
    city: str,
    preferences: str,
    neighborhoods: list[NeighborhoodAggregate],
    amenities: list[AmenityRequest],
    concerns: dict[str, list[str]],
    qualitative_scores: dict[str, float],
    posts_scraped: int,
    map_data: MapData,
    summary: str | None = None,
    config: PipelineConfig = DEFAULT_PIPELINE_CONFIG,
) -> RecommendationResponse:
    top = neighborhoods[:config.top_n]
    ranked = [
        RankedNeighborhood(
            neighborhood=n.name,
            match_reasons=match_reasons(n, len(amenities), posts_scraped),
            concerns=concerns.get(n.name, []),
            amenity_breakdown=dict(n.amenity_counts),
            qualitative_score=qualitative_scores.get(n.name),
        )
        for n in top
    ]
    return RecommendationResponse(
        city=city,
        user_preferences=preferences,
        recommendations=Recommendations(recommendations=ranked, summary=summary),
        map_data=map_data,
    )
