"""Data models shared across glfast."""
