"""Agno agent logic for LLM orchestration.

Server side of the chat: streamed text replies with per-session history, and
one-shot image generation.

Responsibilities:
    - Agent initialization with OpenAI models
    - Conversation context storage keyed by session id
    - Streaming token generation
    - Image generation through the OpenAI Images API

Maintains clean separation from the HTTP layer.
"""

from src.agent.chat_agent import AgentService, get_agent_service
from src.agent.config import AgentConfig, get_agent_config

__all__ = ["AgentConfig", "AgentService", "get_agent_config", "get_agent_service"]
