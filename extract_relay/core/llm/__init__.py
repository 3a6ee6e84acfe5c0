"""Upstream LLM provider integration.

This package is intentionally small and conservative:
- No key, payload or response logging.
- Configured from the startup configuration object.
- Pass-through only: the client never inspects or rewrites the payload.
"""
