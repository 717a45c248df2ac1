"""Concrete adapters for the interfaces in ``duende.interfaces``."""
