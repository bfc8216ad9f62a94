"""passman: local encrypted password vault."""

__version__ = "1.0.0"
