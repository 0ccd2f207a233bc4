"""Real-estate listing browser: search, filtering and saved properties."""

__version__ = "0.1.0"
