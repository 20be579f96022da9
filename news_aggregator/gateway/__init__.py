"""API gateway - request aggregation over the news and comments services."""

from .aggregator import DownstreamResponse, RequestAggregator, compose_details

__all__ = ["DownstreamResponse", "RequestAggregator", "compose_details"]
