"""Configuration module -- exports Settings and load_settings.

Entry points call ``load_settings()``; there is no module-level instance,
each run reads the environment afresh.
"""

from ragapp.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
