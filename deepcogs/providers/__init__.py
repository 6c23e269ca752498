"""Concrete adapters for the interfaces in ``deepcogs.interfaces``."""
