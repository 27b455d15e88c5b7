"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from betabreaker.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the climbing web app to call the API.

    No cookies are used; admin calls authenticate with the X-Admin-Token header.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "X-Admin-Token", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
    )
