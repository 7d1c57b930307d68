"""
Runtime configuration for Sun Ledger.

Values come from the environment (optionally a local .env file) so that the
collection runner and tests can point at different databases without code
changes.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# SQLite file holding the append-only record set
DB_PATH = os.getenv("SUN_LEDGER_DB_PATH", "astronomical_data.db")

# Upper bound on dates processed per collection request (rate-limited upstreams)
MAX_DATES_PER_REQUEST = int(os.getenv("SUN_LEDGER_MAX_DATES", "30"))

HTTP_TIMEOUT_SECONDS = float(os.getenv("SUN_LEDGER_HTTP_TIMEOUT", "15.0"))

# Nominatim usage policy requires an identifying User-Agent
USER_AGENT = os.getenv("SUN_LEDGER_USER_AGENT", "SunLedger/1.0")

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}

LIVE_GEOCODING = os.getenv("SUN_LEDGER_LIVE_GEOCODING", "1") not in ("0", "false", "False", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
