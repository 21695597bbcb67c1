"""VIN history report backend."""

__version__ = "0.1.0"
