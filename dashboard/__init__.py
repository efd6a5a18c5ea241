"""Terminal dashboard for the irrigation snapshot service."""

__all__ = []
