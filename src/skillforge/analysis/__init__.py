"""Content analysis: external service client, parsing, caching."""
