from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class ProviderConfig:
    google_maps_api_key: str = os.getenv("GOOGLE_MAPS_API_KEY", "")
    google_maps_base_url: str = "https://maps.googleapis.com/maps/api"
    reddit_base_url: str = "https://www.reddit.com"
    reddit_user_agent: str = os.getenv(
        "REDDIT_USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    )
    timeout: float = 10.0
    search_radius_m: int = 8000
    max_pages: int = 3
    places_interval_s: float = 0.2
    brand_concurrency: int = 4


DEFAULT_PROVIDER_CONFIG = ProviderConfig()
