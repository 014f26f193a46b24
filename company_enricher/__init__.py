"""Fill gaps in company records from Wikipedia articles."""

__version__ = "0.1.0"
