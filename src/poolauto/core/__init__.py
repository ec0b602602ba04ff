"""Shared helpers with no planning semantics of their own."""

from poolauto.core.merge import deep_merge

__all__ = ["deep_merge"]
