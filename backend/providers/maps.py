from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from .config import DEFAULT_PROVIDER_CONFIG, ProviderConfig
from .errors import ProviderError

logger = logging.getLogger(__name__)

_OK_STATUSES = ("OK", "ZERO_RESULTS")


class LatLng(BaseModel):
    lat: float
    lng: float


class Geometry(BaseModel):
    location: LatLng


class AddressComponent(BaseModel):
    long_name: str
    types: list[str] = Field(default_factory=list)


class GeocodeResult(BaseModel):
    formatted_address: str = ""
    address_components: list[AddressComponent] = Field(default_factory=list)
    geometry: Geometry | None = None


class NearbyPlace(BaseModel):
    name: str
    geometry: Geometry


class PlacesPage(BaseModel):
    results: list[NearbyPlace] = Field(default_factory=list)
    next_page_token: str | None = None


class _GeocodeResponse(BaseModel):
    results: list[GeocodeResult] = Field(default_factory=list)


class MapsClient:
    """Google Maps web services: geocoding, reverse geocoding, nearby search."""

    def __init__(
        self,
        config: ProviderConfig = DEFAULT_PROVIDER_CONFIG,
        http: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self._http = http or httpx.Client(
            base_url=config.google_maps_base_url,
            timeout=config.timeout,
        )

    def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        if not self.config.google_maps_api_key:
            raise ProviderError("google_maps", "GOOGLE_MAPS_API_KEY is not configured")

        response = self._http.get(path, params={**params, "key": self.config.google_maps_api_key})
        response.raise_for_status()
        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("google_maps", f"non-JSON response: {exc}") from exc

        status = data.get("status", "") if isinstance(data, dict) else ""
        if status not in _OK_STATUSES:
            raise ProviderError("google_maps", f"{path} returned status {status or 'unknown'}")
        return data

    def geocode(self, address: str) -> list[GeocodeResult]:
        data = self._get("/geocode/json", {"address": address})
        try:
            return _GeocodeResponse.model_validate(data).results
        except ValidationError as exc:
            raise ProviderError("google_maps", f"unexpected geocode shape: {exc}") from exc

    def reverse_geocode(self, lat: float, lng: float) -> list[GeocodeResult]:
        data = self._get("/geocode/json", {"latlng": f"{lat},{lng}"})
        try:
            return _GeocodeResponse.model_validate(data).results
        except ValidationError as exc:
            raise ProviderError("google_maps", f"unexpected reverse geocode shape: {exc}") from exc

    def places_nearby(
        self,
        location: LatLng,
        radius: int,
        place_type: str,
        keyword: str | None = None,
        page_token: str | None = None,
    ) -> PlacesPage:
        params: dict[str, Any] = {
            "location": f"{location.lat},{location.lng}",
            "radius": radius,
            "type": place_type,
        }
        if keyword:
            params["keyword"] = keyword
        if page_token:
            params["pagetoken"] = page_token

        data = self._get("/place/nearbysearch/json", params)
        try:
            return PlacesPage.model_validate(data)
        except ValidationError as exc:
            raise ProviderError("google_maps", f"unexpected places shape: {exc}") from exc

    def close(self) -> None:
        self._http.close()
