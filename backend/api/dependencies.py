"""Shared dependencies for API routes.

The clients live on ``app.state``; they are created once in the app
lifespan and released on shutdown.
"""

from fastapi import Request

from database import Database
from services.esco_client import EscoClient
from services.gemini_client import GeminiClient


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_esco_client(request: Request) -> EscoClient:
    return request.app.state.esco


def get_gemini_client(request: Request) -> GeminiClient:
    return request.app.state.gemini
