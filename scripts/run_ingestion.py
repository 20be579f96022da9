#!/usr/bin/env python3
"""Run a single ingestion tick: fetch every configured feed and save the batch."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from news_aggregator.config.logging import configure_logging
from news_aggregator.config.settings import settings
from news_aggregator.server import build_scheduler
from news_aggregator.storage.factory import create_post_storage


async def run_once():
    storage = create_post_storage()
    scheduler = build_scheduler(storage)
    try:
        return await scheduler.run_once(), storage.count()
    finally:
        await scheduler.shutdown()
        storage.close()


def main():
    configure_logging(settings.log_level, settings.log_json)

    print("\n" + "=" * 50)
    print("NEWS INGESTION")
    print("=" * 50 + "\n")

    report, total = asyncio.run(run_once())

    print("\nRESULTS:")
    print(f"  Items: {report.fetched} fetched, {report.saved} new")
    if report.failed_feeds:
        print(f"  Failed feeds: {', '.join(report.failed_feeds)}")
    if report.error:
        print(f"  Save error: {report.error}")
    print(f"\nSTORE: {total} posts")
    print(f"TIME: {report.elapsed_seconds:.1f}s\n")


if __name__ == "__main__":
    main()
