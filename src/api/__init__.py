"""FastAPI endpoints for the chat backend.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time chat streaming.

Endpoints:
    - GET /health: Service health status
    - POST /chat/stream: Streamed chat replies (SSE)
    - POST /images/generate: One-shot image generation
"""

from src.api.app import app, create_app

__all__ = ["app", "create_app"]
