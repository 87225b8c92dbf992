"""Application services and their wiring."""
