"""
Sun Ledger: Multi-Source Daylight Collection

Collects sunrise, sunset and day-length observations for a place and date
from two independent public astronomy APIs, keeps every responding source's
answer side by side, and derives comparative statistics across locations,
dates and latitudes.

Architecture:
    providers/     - One adapter per upstream API:
                     * sunrise_sunset_org.py - absolute ISO timestamps
                     * sunrisesunset_io.py   - local 12h clock + UTC offset
    geocoding.py   - Place name -> coordinates (Nominatim, then static table)
    acquisition.py - All-settle fan-out across providers, date-range loop
    store.py       - Append-only SQLite record store
    analytics.py   - Aggregates, correlation, trends, seasonal buckets

Entry Points:
    main.py        - Collect a place/date range and print the statistics
"""

__version__ = "1.0.0"
__author__ = "Sun Ledger"
