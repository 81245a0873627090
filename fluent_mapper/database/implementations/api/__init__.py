"""HTTP API adapter."""

from .api_adapter import APIAdapter

__all__ = ["APIAdapter"]
