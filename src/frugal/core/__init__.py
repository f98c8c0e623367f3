"""Core cost controls: response cache and credential rotation."""
