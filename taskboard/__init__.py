"""Task query and aggregate-count data-access layer."""

__version__ = "1.0.0"
