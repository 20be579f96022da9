"""Wiring for the four services: build each app from settings."""

from fastapi import FastAPI
import structlog

from .config.settings import Settings, settings as default_settings
from .config.feeds import load_feeds, load_request_period

logger = structlog.get_logger()

SERVICES = ("news", "comments", "moderation", "gateway")

DEFAULT_PORTS = {
    "gateway": 8080,
    "comments": 8081,
    "news": 8082,
    "moderation": 8083,
}


def ingestion_interval_seconds(cfg: Settings) -> float:
    """Polling period: NA_REQUEST_PERIOD_MINUTES wins, then the feeds file."""
    if "request_period_minutes" not in cfg.model_fields_set:
        from_file = load_request_period(cfg.feeds_path)
        if from_file:
            return from_file * 60
    return cfg.request_period_seconds


def build_scheduler(storage, cfg: Settings = None):
    from .ingestion.fetcher import RSSFetcher
    from .pipeline.scheduler import IngestionScheduler

    cfg = cfg or default_settings
    return IngestionScheduler(
        fetcher=RSSFetcher(cfg.fetch_timeout_seconds, cfg.fetch_max_concurrency),
        storage=storage,
        feeds=load_feeds(cfg.feeds_path),
        interval_seconds=ingestion_interval_seconds(cfg),
    )


def build_app(service: str, cfg: Settings = None) -> FastAPI:
    """Create the FastAPI app for one service."""
    cfg = cfg or default_settings

    if service == "news":
        from .api.news import create_app
        from .storage.factory import create_post_storage

        storage = create_post_storage(cfg=cfg)
        scheduler = build_scheduler(storage, cfg) if cfg.enable_ingestion else None
        return create_app(storage, scheduler=scheduler, items_per_page=cfg.items_per_page)

    if service == "comments":
        from .api.comments import create_app
        from .moderation.gate import ModerationGate
        from .storage.factory import create_comment_storage

        gate = ModerationGate(cfg.moderation_service_url, cfg.moderation_timeout_seconds)
        return create_app(create_comment_storage(cfg=cfg), gate)

    if service == "moderation":
        from .moderation.service import create_app
        return create_app(cfg.forbidden_word_list)

    if service == "gateway":
        from .gateway.aggregator import RequestAggregator
        from .gateway.app import create_app

        aggregator = RequestAggregator(
            cfg.news_service_url, cfg.comments_service_url, cfg.downstream_timeout_seconds
        )
        return create_app(aggregator)

    raise ValueError(f"unknown service {service!r}, expected one of {', '.join(SERVICES)}")
