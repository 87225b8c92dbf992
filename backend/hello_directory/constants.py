"""
Hello Directory Global Constants

Centralized location for all system-wide constants used across the application.
"""

from datetime import datetime, timezone

# Cache namespaces
HELLO_CACHE = "helloCache"

# Key returned by the key generator when a call has no arguments
DEFAULT_CACHE_KEY = "defaultKey"

# Separator between namespace and key in physical cache keys
NAMESPACE_SEPARATOR = "::"

# Paging
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# Timestamp Functions
def get_current_timestamp() -> datetime:
    """Get current timestamp with UTC timezone.

    Returns:
        datetime: Current UTC timestamp
    """
    return datetime.now(timezone.utc)


# Application Constants
APP_NAME = "Hello Directory"
APP_VERSION = "1.0.0"
