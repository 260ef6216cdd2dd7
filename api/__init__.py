"""Vehicle Marketplace Sales API."""

__version__ = "1.0.0"
