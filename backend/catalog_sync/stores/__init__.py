"""Persistence stores for catalog-sync."""

from .run_store import RunStore

__all__ = ["RunStore"]
