"""Scope-based authorization."""

from .scopes import OwnedResourceMixin, ScopedResourceMixin, ScopeType
from .resolver import ScopeResolver

__all__ = [
    "OwnedResourceMixin",
    "ScopedResourceMixin",
    "ScopeType",
    "ScopeResolver",
]
