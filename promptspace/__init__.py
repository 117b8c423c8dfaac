"""Multi-tenant prompt workspace: scoped access control and prompt version history."""

__version__ = "0.1.0"
