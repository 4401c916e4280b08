"""Core runtime helpers (logging, retries)."""
