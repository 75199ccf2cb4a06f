"""Loss incident report service."""

__version__ = "1.0.0"
