"""Typer command line interface for catalog-sync."""

from .app import app

__all__ = ["app"]
