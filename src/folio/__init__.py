"""Folio: a markdown-backed portfolio and blog site."""

__version__ = "0.1.0"
