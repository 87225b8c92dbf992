"""Core configuration, logging and database management."""
