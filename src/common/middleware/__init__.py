"""Common middleware for EventFlow."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
