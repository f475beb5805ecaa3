"""OC Transpo GTFS-Realtime feed fetcher."""

import logging
import time
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests

from .config import API_KEY_HEADER, FEED_FORMAT_JSON, FEED_FORMAT_PROTOBUF, Config
from .errors import InvalidResponse, InvalidURL
from .feed_decoder import decode_feed, decode_feed_protobuf
from .models import FeedMessage

logger = logging.getLogger(__name__)


class FeedClient:
    """Fetches the TripUpdates feed over HTTP."""

    def __init__(self, config: Optional[Config] = None, session: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            config: Endpoint, key and timeout. Defaults to Config.from_env().
            session: requests session to reuse; a new one is created if omitted.
        """
        self.config = config or Config.from_env()
        self.session = session or requests.Session()
        self._cached: Optional[Tuple[str, bytes, float]] = None  # (url, body, fetched_at)
        self._cache_ttl = self.config.cache_ttl_s

    @property
    def feed_url(self) -> str:
        url = self.config.api_url
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidURL(url)
        if self.config.feed_format == FEED_FORMAT_JSON:
            separator = "&" if parsed.query else "?"
            url = f"{url}{separator}format=json"
        return url

    def fetch_feed(self) -> FeedMessage:
        """
        Download and decode the whole TripUpdates feed.

        Returns:
            Decoded FeedMessage.

        Raises:
            InvalidURL: If the configured endpoint is not an http(s) URL.
            InvalidResponse: On timeouts, transport errors and non-200 responses.
            DecodingError: If the body cannot be decoded.
        """
        data = self._fetch(self.feed_url)
        if self.config.feed_format == FEED_FORMAT_PROTOBUF:
            return decode_feed_protobuf(data)
        return decode_feed(data)

    def _fetch(self, url: str) -> bytes:
        now = time.time()
        if self._cached is not None:
            cached_url, data, fetched_at = self._cached
            if cached_url == url and now - fetched_at < self._cache_ttl:
                logger.debug(f"Using feed fetched {now - fetched_at:.0f}s ago")
                return data
            self._cached = None

        headers = {API_KEY_HEADER: self.config.api_key}
        if self.config.feed_format == FEED_FORMAT_JSON:
            headers["Accept"] = "application/json"

        logger.info(f"Fetching GTFS-RT TripUpdates from {url}")
        try:
            response = self.session.get(url, headers=headers, timeout=self.config.timeout_s)
        except requests.RequestException as e:
            logger.error(f"Network error fetching {url}: {e}")
            raise InvalidResponse(str(e)) from e

        if response.status_code != 200:
            logger.error(f"Feed request failed with HTTP {response.status_code}: {response.text[:200]}")
            raise InvalidResponse(f"HTTP {response.status_code}")

        data = response.content
        if self._cache_ttl > 0:
            self._cached = (url, data, now)
        return data

    def clear_cache(self) -> None:
        """Forget the last fetched feed."""
        self._cached = None
