"""Spyglass: an operation schema introspector."""

__version__ = "0.1.0"
