"""Pydantic models for persisted blobs and the admin API."""
