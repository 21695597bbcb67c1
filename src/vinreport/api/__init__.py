"""FastAPI application for the VIN report service."""
