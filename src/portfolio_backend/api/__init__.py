"""FastAPI application for the portfolio backend."""
