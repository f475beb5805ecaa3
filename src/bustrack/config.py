"""Configuration for the OC Transpo GTFS-Realtime feed and static indexes."""

import os
from dataclasses import dataclass

# OC Transpo GTFS-Realtime TripUpdates endpoint
OC_TRANSPO_API_URL = "https://nextrip-public-api.azure-api.net/octranspo/gtfs-rt-tp/beta/v1/TripUpdates"
API_KEY_HEADER = "Ocp-Apim-Subscription-Key"

DEFAULT_TIMEOUT_S = 30.0
DEFAULT_CACHE_TTL_S = 30.0
DEFAULT_DATA_DIR = "data"

FEED_FORMAT_JSON = "json"
FEED_FORMAT_PROTOBUF = "protobuf"

# Departure window, in minutes relative to now
MIN_MINUTES = -5
MAX_MINUTES = 120
MAX_DEPARTURES = 5

# Cached departures older than this are dropped when aged for offline display
OFFLINE_FLOOR_MINUTES = -2


@dataclass
class Config:
    """
    Runtime settings.

    Env vars:
      - BUSTRACK_API_URL: TripUpdates endpoint
      - BUSTRACK_API_KEY: subscription key sent with each request
      - BUSTRACK_TIMEOUT_S: request timeout (default 30)
      - BUSTRACK_CACHE_TTL_S: in-process feed cache TTL (default 30)
      - BUSTRACK_DATA_DIR: directory holding the static index files
      - BUSTRACK_FEED_FORMAT: "json" (default) or "protobuf"
    """

    api_url: str = OC_TRANSPO_API_URL
    api_key: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S
    cache_ttl_s: float = DEFAULT_CACHE_TTL_S
    data_dir: str = DEFAULT_DATA_DIR
    feed_format: str = FEED_FORMAT_JSON

    @classmethod
    def from_env(cls) -> "Config":
        """Build a Config from BUSTRACK_* environment variables."""
        feed_format = os.getenv("BUSTRACK_FEED_FORMAT", FEED_FORMAT_JSON).strip().lower()
        if feed_format not in (FEED_FORMAT_JSON, FEED_FORMAT_PROTOBUF):
            raise ValueError(f"Unsupported feed format '{feed_format}'")

        return cls(
            api_url=os.getenv("BUSTRACK_API_URL", OC_TRANSPO_API_URL),
            api_key=os.getenv("BUSTRACK_API_KEY", ""),
            timeout_s=float(os.getenv("BUSTRACK_TIMEOUT_S", DEFAULT_TIMEOUT_S)),
            cache_ttl_s=float(os.getenv("BUSTRACK_CACHE_TTL_S", DEFAULT_CACHE_TTL_S)),
            data_dir=os.getenv("BUSTRACK_DATA_DIR", DEFAULT_DATA_DIR),
            feed_format=feed_format,
        )
