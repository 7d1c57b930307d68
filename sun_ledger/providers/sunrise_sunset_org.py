"""
sunrise-sunset.org Provider for Sun Ledger

With formatted=0 the API returns absolute ISO-8601 timestamps (UTC) and an
integer day_length in seconds, so normalization is mostly parsing.

Example response:
    {
      "results": {
        "sunrise": "2024-06-01T03:54:12+00:00",
        "sunset": "2024-06-01T20:26:33+00:00",
        "solar_noon": "2024-06-01T12:10:22+00:00",
        "day_length": 59541,
        ...
      },
      "status": "OK"
    }
"""

import logging
from datetime import date
from typing import Any, Dict

from sun_ledger.models import NormalizedDaylight, parse_utc
from sun_ledger.providers.base import SourceAdapter

logger = logging.getLogger(__name__)


class SunriseSunsetOrgAdapter(SourceAdapter):
    """Provider A: api.sunrise-sunset.org."""

    source = "sunrise-sunset.org"
    BASE_URL = "https://api.sunrise-sunset.org/json"

    def build_params(self, latitude: float, longitude: float, on_date: date) -> Dict[str, Any]:
        return {
            "lat": latitude,
            "lng": longitude,
            "date": on_date.isoformat(),
            "formatted": 0,
        }

    def parse(self, payload: Dict[str, Any], on_date: date) -> NormalizedDaylight:
        results = payload["results"]
        return NormalizedDaylight(
            sunrise=parse_utc(results["sunrise"]),
            sunset=parse_utc(results["sunset"]),
            solar_noon=parse_utc(results["solar_noon"]),
            day_length=int(results["day_length"]),
        )
