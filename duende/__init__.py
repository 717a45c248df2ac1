"""Duende: REST backend for the flamenco events finder."""

__version__ = "15.4.0"
