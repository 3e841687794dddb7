"""Folio: concept services for a social reading application."""

__version__ = "0.1.0"
