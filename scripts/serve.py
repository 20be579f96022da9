#!/usr/bin/env python3
"""Run one of the services under uvicorn.

Usage:
    python scripts/serve.py news
    python scripts/serve.py comments --port 8081
    python scripts/serve.py moderation
    python scripts/serve.py gateway

Environment Variables:
    NA_DATABASE_URL / DATABASE_URL: posts database
    NA_COMMENTS_DATABASE_URL / COMMENTS_DATABASE_URL: comments database
    NA_REQUEST_PERIOD_MINUTES: feed polling period
    NA_NEWS_SERVICE_URL, NA_COMMENTS_SERVICE_URL, NA_MODERATION_SERVICE_URL
"""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
import uvicorn

from news_aggregator.config.logging import configure_logging
from news_aggregator.config.settings import settings
from news_aggregator.server import DEFAULT_PORTS, SERVICES, build_app


def main():
    parser = argparse.ArgumentParser(description="Run a news aggregator service")
    parser.add_argument("service", choices=SERVICES)
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()

    load_dotenv()
    configure_logging(settings.log_level, settings.log_json)

    app = build_app(args.service)
    port = args.port or DEFAULT_PORTS[args.service]
    uvicorn.run(app, host=args.host, port=port, log_config=None)


if __name__ == "__main__":
    main()
