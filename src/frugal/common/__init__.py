"""Shared utilities: errors, logging, crypto, background tasks."""
