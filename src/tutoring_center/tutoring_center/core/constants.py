"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SAMPLE_LIMIT = 5
DEFAULT_CREATED_ID_LIMIT = 10
DEFAULT_LIST_DAYS = 7
