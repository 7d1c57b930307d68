"""
Common capability shared by every source adapter.

An adapter turns one upstream API's bespoke response into NormalizedDaylight
or raises AdapterError. It never lets a raw httpx/parse exception escape, so
the acquisition fan-out can treat every failure the same way.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, Optional

import httpx

from sun_ledger import config
from sun_ledger.errors import AdapterError, ErrorType, categorize_error
from sun_ledger.models import NormalizedDaylight

logger = logging.getLogger(__name__)

# sunset - sunrise must agree with the reported day length to the second
DAY_LENGTH_TOLERANCE_SECONDS = 1.0


class SourceAdapter(ABC):
    """Base class for one external sunrise/sunset provider."""

    source: str = "unknown"
    BASE_URL: str = ""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: Optional[float] = None):
        self.client = client
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS

    @abstractmethod
    def build_params(self, latitude: float, longitude: float, on_date: date) -> Dict[str, Any]:
        """Query string for the upstream request."""

    @abstractmethod
    def parse(self, payload: Dict[str, Any], on_date: date) -> NormalizedDaylight:
        """Translate the provider's JSON body into NormalizedDaylight."""

    async def fetch(self, latitude: float, longitude: float, on_date: date) -> NormalizedDaylight:
        """
        Fetch and normalize one day's observation.

        Raises:
            AdapterError: on network failure, non-success status, malformed
                payload or an inverted/inconsistent sunrise-sunset pair.
        """
        params = self.build_params(latitude, longitude, on_date)
        logger.info(f"[{self.__class__.__name__}] Fetching {on_date} for ({latitude:.4f}, {longitude:.4f})")

        try:
            payload = await self._get_json(params)
        except AdapterError:
            raise
        except Exception as e:
            error_type, error_msg = categorize_error(e)
            raise AdapterError(self.source, error_type, error_msg) from e

        if payload.get("status") != "OK":
            raise AdapterError(
                self.source, ErrorType.STATUS_ERROR,
                f"Upstream status {payload.get('status')!r}"
            )

        try:
            data = self.parse(payload, on_date)
        except AdapterError:
            raise
        except Exception as e:
            error_type, error_msg = categorize_error(e)
            raise AdapterError(self.source, error_type, error_msg) from e

        self.validate(data)
        logger.info(f"[{self.__class__.__name__}] {on_date}: day length {data.day_length}s")
        return data

    async def _get_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.client is not None:
            resp = await self.client.get(self.BASE_URL, params=params, headers=config.HEADERS)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(self.BASE_URL, params=params, headers=config.HEADERS)

        if resp.status_code != 200:
            logger.warning(f"[{self.__class__.__name__}] HTTP {resp.status_code}: {resp.text[:200]}")
            error_type = ErrorType.RATE_LIMIT if resp.status_code in (429, 503) else ErrorType.STATUS_ERROR
            raise AdapterError(self.source, error_type, f"HTTP {resp.status_code}")

        payload = resp.json()
        if not isinstance(payload, dict):
            raise AdapterError(self.source, ErrorType.PARSE_ERROR, "Response body is not an object")
        return payload

    def validate(self, data: NormalizedDaylight) -> None:
        """Reject malformed observations before they can be persisted."""
        if data.sunrise >= data.sunset:
            raise AdapterError(
                self.source, ErrorType.INVALID_RECORD,
                f"sunrise {data.sunrise.isoformat()} is not before sunset {data.sunset.isoformat()}"
            )
        drift = abs(data.measured_day_length - data.day_length)
        if drift > DAY_LENGTH_TOLERANCE_SECONDS:
            raise AdapterError(
                self.source, ErrorType.INVALID_RECORD,
                f"day_length {data.day_length}s disagrees with sunset-sunrise "
                f"{data.measured_day_length:.0f}s"
            )
