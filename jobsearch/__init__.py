"""Job search, filtering, normalization and autocomplete for a job board."""

__version__ = "0.1.0"
