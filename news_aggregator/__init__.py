"""News aggregator: feed ingestion, moderated comments and an API gateway."""

__version__ = "0.1.0"
