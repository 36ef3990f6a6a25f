"""Building blocks for event-driven services."""

__version__ = "0.1.0"