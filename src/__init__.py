"""Studio Chat - single-session conversational client for a generative model.

Combines FastAPI for HTTP streaming, Agno for agent orchestration,
NiceGUI for the chat timeline, and Pydantic for data validation.

Components:
    - session: Message log, intent classification and the session controller
    - agent: LLM orchestration with per-session history and image generation
    - api: HTTP endpoints and streaming responses
    - ui: Web interface and the HTTP model backend
    - models: Message records and request/response schemas
"""

__version__ = "0.1.0"
