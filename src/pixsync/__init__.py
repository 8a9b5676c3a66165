"""pixsync: keep a project's image asset files in step with its saved document."""

__version__ = "0.1.0"
