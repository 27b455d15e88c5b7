"""Middleware registration."""

from fastapi import FastAPI

from betabreaker.config import Settings
from betabreaker.middleware.cors import setup_cors
from betabreaker.middleware.error_handler import setup_error_handlers
from betabreaker.middleware.logging import setup_logging
from betabreaker.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, then install handlers and middleware.

    Starlette runs the last-added middleware outermost, so CORS is added after
    the request-id middleware and its headers land on error responses too.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
