"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DATE_FORMAT = "%Y-%m-%d"
NOT_AVAILABLE = "N/A"
DEFAULT_REPORT_DAYS = 30
DEFAULT_ABSENCE_LOOKBACK_DAYS = 14
MAX_ABSENCE_LOOKBACK_DAYS = 366
