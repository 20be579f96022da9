"""Moderation service: rejects text containing forbidden words."""

from typing import Iterable, List

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from ..api.common import install_request_middleware, get_correlation

logger = structlog.get_logger()


def contains_forbidden_words(text: str, forbidden_words: Iterable[str]) -> bool:
    """Case-insensitive substring check."""
    text = text.lower()
    return any(word and word in text for word in forbidden_words)


def create_app(forbidden_words: List[str] = None) -> FastAPI:
    """Build the moderation FastAPI app."""
    if forbidden_words is None:
        from ..config.settings import settings
        forbidden_words = settings.forbidden_word_list
    words = [w.lower() for w in forbidden_words]

    app = FastAPI(title="Moderation Service")
    install_request_middleware(app, service="moderation")

    @app.post("/censor")
    async def censor(request: Request):
        """Answer 200 for acceptable text, 400 otherwise."""
        log = logger.bind(request_id=get_correlation(request).request_id)
        try:
            payload = await request.json()
        except ValueError:
            log.info("moderation_invalid_json")
            return JSONResponse(status_code=400, content={"error": "Invalid JSON format"})

        text = payload.get("text") if isinstance(payload, dict) else None
        if not isinstance(text, str):
            log.info("moderation_invalid_json")
            return JSONResponse(status_code=400, content={"error": "Invalid JSON format"})

        if contains_forbidden_words(text, words):
            log.info("moderation_text_rejected", length=len(text))
            return JSONResponse(status_code=400, content={"error": "Text contains forbidden words"})

        log.info("moderation_text_passed", length=len(text))
        return JSONResponse(status_code=200, content={"status": "ok"})

    return app
