"""Cinelist — shared movie & TV watchlists (server + client core)."""

__version__ = "1.0.0"
