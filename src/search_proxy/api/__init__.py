"""FastAPI application for the search proxy."""
