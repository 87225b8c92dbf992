"""
Domain Layer

Cache-aside and user directory logic, independent of any backend.
"""
