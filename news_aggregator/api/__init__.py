"""HTTP services built on FastAPI."""
