"""Concrete adapters for the interfaces in ``ragapp.interfaces``."""
