"""
Providers package for Sun Ledger

Each provider wraps one public sunrise/sunset API and normalizes its answer
into NormalizedDaylight (UTC instants + day length in seconds):

1. sunrise-sunset.org - absolute ISO timestamps, day_length in seconds
2. sunrisesunset.io   - local 12-hour clock strings + utc_offset minutes,
                        day_length as "HH:MM:SS"

Both are queried for every date; each one that answers contributes its own
record.
"""

from typing import List, Optional

import httpx

from sun_ledger.providers.base import SourceAdapter
from sun_ledger.providers.sunrise_sunset_org import SunriseSunsetOrgAdapter
from sun_ledger.providers.sunrisesunset_io import (
    SunriseSunsetIoAdapter,
    parse_clock_12h,
    parse_duration_seconds,
)


def default_adapters(client: Optional[httpx.AsyncClient] = None) -> List[SourceAdapter]:
    """The configured provider set, optionally sharing one HTTP client."""
    return [
        SunriseSunsetOrgAdapter(client=client),
        SunriseSunsetIoAdapter(client=client),
    ]


__all__ = [
    "SourceAdapter",
    "default_adapters",
    # Provider A (absolute timestamps)
    "SunriseSunsetOrgAdapter",
    # Provider B (local clock + offset)
    "SunriseSunsetIoAdapter",
    "parse_clock_12h",
    "parse_duration_seconds",
]
