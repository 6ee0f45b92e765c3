"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_RULE_PRIORITY = 100
DEFAULT_GROUP_NO = 1
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M:%S"
API_PREFIX = "/api/course-periods"
