"""Helpers for the HTTP layer that calls into the workspace core."""

from .errors import STATUS_BY_KIND, to_http_exception

__all__ = ["STATUS_BY_KIND", "to_http_exception"]
