"""Application services composed from the core."""
