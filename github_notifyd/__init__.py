"""GitHub notifications daemon."""

__version__ = "1.0.0"
