"""
PhyloPic API client.

This module wraps the PhyloPic v2 REST API with a ``requests`` session and
provides the two lookups used when placing silhouettes on charts: resolving a
taxonomic name to an image uuid, and fetching an image by uuid.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from phylopic_layers.core.config import PhyloPicSettings, get_settings
from phylopic_layers.core.images import SilhouetteImage, parse_png, parse_svg

__all__ = [
    "PhyloPicClient",
    "PhyloPicError",
    "PhyloPicAPIError",
    "PhyloPicResponseError",
    "get_default_client",
]

logger = logging.getLogger(__name__)

API_MEDIA_TYPE = "application/vnd.phylopic.v2+json"


class PhyloPicError(Exception):
    """Base exception for PhyloPic related errors."""

    pass


class PhyloPicAPIError(PhyloPicError):
    """Raised when a request to the PhyloPic service fails."""

    pass


class PhyloPicResponseError(PhyloPicError):
    """Raised when the PhyloPic service returns an unexpected payload."""

    pass


class PhyloPicClient:
    """
    Client for the PhyloPic image service.

    Example:
        >>> client = PhyloPicClient()
        >>> uuid = client.resolve_name("Iris")
        >>> img = client.get_phylopic(uuid)
    """

    FORMATS = ("vector", "raster")

    def __init__(
        self,
        base_url: str = "https://api.phylopic.org",
        timeout: float = 30.0,
        build: Optional[int] = None,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: API root URL
            timeout: Timeout in seconds applied to every request
            build: PhyloPic build number; omitted from requests when None
            session: Optional preconfigured session (useful for testing)
            user_agent: Optional User-Agent header value
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.build = build
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': API_MEDIA_TYPE})
        if user_agent:
            self.session.headers.update({'User-Agent': user_agent})

    @classmethod
    def from_settings(cls, settings: Optional[PhyloPicSettings] = None) -> "PhyloPicClient":
        """Create a client from PhyloPic settings."""
        settings = settings or get_settings()
        return cls(
            base_url=settings.base_url,
            timeout=settings.timeout,
            build=settings.build,
            user_agent=settings.user_agent,
        )

    def _request(self, url: str, params: Optional[Dict] = None) -> requests.Response:
        logger.debug("PhyloPic GET %s params=%s", url, params)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise PhyloPicAPIError(f"PhyloPic request to {url} failed: {e}") from e
        return response

    def get(self, endpoint: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make a GET request to an API endpoint and return the decoded JSON."""
        params = dict(params or {})
        if self.build is not None:
            params.setdefault("build", self.build)

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        response = self._request(url, params=params)
        try:
            payload = response.json()
        except ValueError as e:
            raise PhyloPicResponseError(f"PhyloPic returned invalid JSON for {endpoint}") from e

        if not isinstance(payload, dict):
            raise PhyloPicResponseError(
                f"PhyloPic returned {type(payload).__name__} for {endpoint}, expected an object"
            )
        return payload

    def download(self, url: str) -> bytes:
        """Download a file URL (e.g. an image file linked from the API)."""
        return self._request(url).content

    @staticmethod
    def normalize_name(name: str) -> str:
        return name.strip().lower().replace("_", " ")

    def get_uuid(self, name: str, n: int = 1) -> List[str]:
        """
        Look up the uuids of silhouettes matching a taxonomic name.

        Args:
            name: Taxonomic name, e.g. "Iris" or "Homo_sapiens"
            n: Maximum number of uuids to return

        Returns:
            List[str]: Up to ``n`` uuids, empty if nothing matches
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("name must be a non-empty string")
        if n < 1:
            raise ValueError("n must be at least 1")

        payload = self.get("images", {
            "filter_name": self.normalize_name(name),
            "page": 0,
            "embed_items": "true",
        })

        items = payload.get("_embedded", {}).get("items", [])
        uuids = [item["uuid"] for item in items if isinstance(item, dict) and "uuid" in item]
        logger.debug("Name %r matched %d PhyloPic images", name, len(uuids))
        return uuids[:n]

    def resolve_name(self, name: str) -> Optional[str]:
        """Resolve a taxonomic name to a single uuid, or None if nothing matches."""
        uuids = self.get_uuid(name, n=1)
        return uuids[0] if uuids else None

    def get_image_links(self, uuid: str) -> Dict[str, Any]:
        """Return the ``_links`` section of an image record."""
        payload = self.get(f"images/{uuid}")
        links = payload.get("_links")
        if not isinstance(links, dict):
            raise PhyloPicResponseError(f"Image {uuid} has no links")
        return links

    def get_svg(self, url: str) -> SilhouetteImage:
        """Download and parse an SVG file."""
        return parse_svg(self.download(url))

    def get_png(self, url: str) -> SilhouetteImage:
        """Download and decode a PNG file."""
        return parse_png(self.download(url))

    @staticmethod
    def _closest_raster(raster_files: List[Dict[str, Any]], height: int) -> str:
        best_href = None
        best_diff = None
        for entry in raster_files:
            try:
                _, file_height = (int(v) for v in entry["sizes"].split("x"))
            except (KeyError, ValueError, AttributeError):
                continue
            diff = abs(file_height - height)
            if best_diff is None or diff < best_diff:
                best_href, best_diff = entry.get("href"), diff

        if not best_href:
            raise PhyloPicResponseError("No usable raster files in image record")
        return best_href

    def get_phylopic(self, uuid: str, format: str = "vector", height: int = 512) -> SilhouetteImage:
        """
        Fetch a silhouette by uuid.

        Args:
            uuid: PhyloPic image uuid
            format: "vector" for the SVG file, "raster" for a PNG file
            height: Preferred PNG height when ``format`` is "raster"

        Returns:
            SilhouetteImage: VectorImage or RasterImage

        Raises:
            ValueError: If ``format`` is unknown
            PhyloPicAPIError: If a request fails
            PhyloPicResponseError: If the image record is malformed
        """
        if format not in self.FORMATS:
            raise ValueError(f"Unsupported format '{format}'. Available: {list(self.FORMATS)}")

        links = self.get_image_links(uuid)

        if format == "vector":
            href = (links.get("vectorFile") or {}).get("href")
            if not href:
                raise PhyloPicResponseError(f"Image {uuid} has no vector file")
            img = self.get_svg(href)
        else:
            img = self.get_png(self._closest_raster(links.get("rasterFiles") or [], height))

        img.metadata["uuid"] = uuid
        logger.info("Fetched %s PhyloPic image %s", format, uuid)
        return img


def get_default_client() -> PhyloPicClient:
    """Create a client configured from the current settings."""
    return PhyloPicClient.from_settings(get_settings())
