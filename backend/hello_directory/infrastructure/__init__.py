"""Infrastructure adapters for the cache and user storage backends."""
