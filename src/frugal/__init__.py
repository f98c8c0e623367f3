"""Frugal: response cache and credential rotation for pay-per-call LLM APIs."""

__version__ = "0.1.0"
