from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import httpx

from ..providers.config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from ..providers.errors import ProviderError
from ..providers.maps import LatLng, MapsClient, NearbyPlace
from ..providers.rate_limit import IntervalGate
from .models import AmenityType, Place

logger = logging.getLogger(__name__)

# Provider sentinel entries that keyword searches sometimes return
_EXCLUDED_NAME_PARTS = ("google", "test")


def brand_tokens(brand: str) -> list[str]:
    return [part for part in brand.lower().split() if len(part) > 2]


def matches_brand(place_name: str, brand: str) -> bool:
    name = place_name.lower()
    if any(part in name for part in _EXCLUDED_NAME_PARTS):
        return False
    return any(token in name for token in brand_tokens(brand))


def _to_place(result: NearbyPlace, amenity_type: AmenityType) -> Place:
    location = result.geometry.location
    return Place(name=result.name, lat=location.lat, lng=location.lng, type=amenity_type)


def geocode_city(maps: MapsClient, city: str) -> LatLng | None:
    try:
        results = maps.geocode(city)
    except (httpx.HTTPError, ProviderError):
        logger.warning("Geocoding %s failed", city, exc_info=True)
        return None
    for result in results:
        if result.geometry is not None:
            return result.geometry.location
    return None


def resolve_neighborhood(maps: MapsClient, lat: float, lng: float) -> str | None:
    """Name the neighborhood containing a coordinate.

    Prefers a ``neighborhood`` address component, then ``locality``, then the
    first segment of the formatted address. ``None`` means unattributable.
    """
    try:
        results = maps.reverse_geocode(lat, lng)
    except (httpx.HTTPError, ProviderError):
        logger.warning("Reverse geocoding %s,%s failed", lat, lng, exc_info=True)
        return None
    if not results:
        return None

    result = results[0]
    for wanted in ("neighborhood", "locality"):
        for component in result.address_components:
            if wanted in component.types:
                return component.long_name
    first = result.formatted_address.split(",")[0].strip()
    return first or None


class AmenityLocator:
    """Finds places of one amenity type around a city's center.

    All places calls made through one locator share a rate gate, so the
    spacing between calls holds even when brand queries run in parallel.
    """

    def __init__(
        self,
        maps: MapsClient,
        config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
        gate: IntervalGate | None = None,
    ) -> None:
        self.maps = maps
        self.config = config
        self.gate = gate or IntervalGate(config.places_interval_s)

    def locate(
        self,
        city: str,
        amenity_type: AmenityType,
        specific_names: list[str] | None = None,
        limit: int | None = None,
        paginate: bool = True,
    ) -> list[Place]:
        """Places for *amenity_type* in *city*.

        With brand names, one keyword query per brand, filtered to matching
        names. Without, a type query that follows page tokens (up to the page
        cap) when *paginate* is set. Errors yield an empty list.
        """
        try:
            center = geocode_city(self.maps, city)
            if center is None:
                return []

            if specific_names:
                places = self._by_brand(center, amenity_type, specific_names)
            else:
                places = self._generic(center, amenity_type, self.config.max_pages if paginate else 1)
        except (httpx.HTTPError, ProviderError):
            logger.warning("Locating %s in %s failed", amenity_type.value, city, exc_info=True)
            return []

        return places[:limit] if limit is not None else places

    def _nearby(self, center: LatLng, amenity_type: AmenityType, **kwargs):
        self.gate.wait()
        return self.maps.places_nearby(
            center, self.config.search_radius_m, amenity_type.value, **kwargs,
        )

    def _search_brand(self, center: LatLng, amenity_type: AmenityType, brand: str) -> list[Place]:
        try:
            page = self._nearby(center, amenity_type, keyword=brand)
        except (httpx.HTTPError, ProviderError):
            logger.warning("Searching for %s failed", brand, exc_info=True)
            return []
        matched = [_to_place(r, amenity_type) for r in page.results if matches_brand(r.name, brand)]
        logger.info("Found %d results for %s, %d match the brand", len(page.results), brand, len(matched))
        return matched

    def _by_brand(self, center: LatLng, amenity_type: AmenityType, brands: list[str]) -> list[Place]:
        workers = max(1, min(self.config.brand_concurrency, len(brands)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            per_brand = list(pool.map(lambda b: self._search_brand(center, amenity_type, b), brands))
        return [place for places in per_brand for place in places]

    def _generic(self, center: LatLng, amenity_type: AmenityType, max_pages: int) -> list[Place]:
        places: list[Place] = []
        token: str | None = None
        for page_number in range(max_pages):
            try:
                page = self._nearby(center, amenity_type, page_token=token)
            except (httpx.HTTPError, ProviderError):
                if page_number == 0:
                    raise
                logger.warning("Page %d for %s failed, keeping earlier pages", page_number, amenity_type.value, exc_info=True)
                break
            places.extend(_to_place(r, amenity_type) for r in page.results)
            token = page.next_page_token
            if not token:
                break
        return places
