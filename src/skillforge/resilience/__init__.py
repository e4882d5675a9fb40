"""Throttling, retry and error classification for outbound calls."""
