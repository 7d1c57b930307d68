"""
Geocoding for Sun Ledger

Resolves a free-text place name to coordinates using an ordered strategy
list, returning the first hit:

1. Live lookup against OpenStreetMap Nominatim (disable with
   SUN_LEDGER_LIVE_GEOCODING=0)
2. Static table of well-known cities: exact name, then substring containment

An unmatched place returns None. There is no default city.
"""

import logging
from typing import Dict, Optional

import httpx

from sun_ledger import config
from sun_ledger.models import Coordinates

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"

CITY_COORDINATES: Dict[str, Coordinates] = {
    "new york": Coordinates(40.7128, -74.0060),
    "los angeles": Coordinates(34.0522, -118.2437),
    "chicago": Coordinates(41.8781, -87.6298),
    "houston": Coordinates(29.7604, -95.3698),
    "phoenix": Coordinates(33.4484, -112.0740),
    "philadelphia": Coordinates(39.9526, -75.1652),
    "san antonio": Coordinates(29.4241, -98.4936),
    "san diego": Coordinates(32.7157, -117.1611),
    "dallas": Coordinates(32.7767, -96.7970),
    "san francisco": Coordinates(37.7749, -122.4194),
    "seattle": Coordinates(47.6062, -122.3321),
    "boston": Coordinates(42.3601, -71.0589),
    "miami": Coordinates(25.7617, -80.1918),
    "london": Coordinates(51.5074, -0.1278),
    "paris": Coordinates(48.8566, 2.3522),
    "tokyo": Coordinates(35.6762, 139.6503),
    "sydney": Coordinates(-33.8688, 151.2093),
    "rio de janeiro": Coordinates(-22.9068, -43.1729),
    "cairo": Coordinates(30.0444, 31.2357),
    "moscow": Coordinates(55.7558, 37.6173),
}


def lookup_static(place: str) -> Optional[Coordinates]:
    """Match against the static city table: exact key first, then containment."""
    normalized = place.strip().lower()
    if not normalized:
        return None

    if normalized in CITY_COORDINATES:
        return CITY_COORDINATES[normalized]

    for city, coords in CITY_COORDINATES.items():
        if city in normalized or normalized in city:
            return coords

    return None


class Geocoder:
    """Service for converting place names to latitude/longitude coordinates."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        live: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.live = config.LIVE_GEOCODING if live is None else live
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS

    async def geocode(self, place: str) -> Optional[Coordinates]:
        """
        Convert a place name to coordinates.

        Args:
            place: Free-text place name

        Returns:
            Coordinates if any strategy matched, None otherwise. Never raises.
        """
        if not place or not place.strip():
            logger.warning("[Geocoder] Empty place name")
            return None

        if self.live:
            coords = await self._lookup_live(place.strip())
            if coords is not None:
                return coords

        coords = lookup_static(place)
        if coords is not None:
            logger.info(f"[Geocoder] Static table resolved '{place}' to ({coords.latitude:.4f}, {coords.longitude:.4f})")
            return coords

        logger.warning(f"[Geocoder] No coordinates found for '{place}'")
        return None

    async def _lookup_live(self, place: str) -> Optional[Coordinates]:
        params = {"q": place, "format": "json", "limit": 1}

        try:
            if self.client is not None:
                resp = await self.client.get(NOMINATIM_URL, params=params, headers=config.HEADERS)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.get(NOMINATIM_URL, params=params, headers=config.HEADERS)

            if resp.status_code != 200:
                logger.warning(f"[Geocoder] Nominatim returned HTTP {resp.status_code} for '{place}'")
                return None

            data = resp.json()
            if not data:
                logger.info(f"[Geocoder] Nominatim has no match for '{place}'")
                return None

            lat = float(data[0]["lat"])
            lon = float(data[0]["lon"])

        except httpx.TimeoutException:
            logger.warning(f"[Geocoder] Timeout during live lookup for '{place}'")
            return None
        except httpx.RequestError as e:
            logger.warning(f"[Geocoder] Network error during live lookup for '{place}': {e}")
            return None
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"[Geocoder] Unparseable Nominatim response for '{place}': {e}")
            return None

        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            logger.warning(f"[Geocoder] Invalid coordinates returned for '{place}': ({lat}, {lon})")
            return None

        logger.info(f"[Geocoder] Live lookup resolved '{place}' to ({lat:.4f}, {lon:.4f})")
        return Coordinates(lat, lon)
