"""Agno agent service for streamed chat and image generation.

Server side of the model backend used by the chat session.

Architecture Decisions:

1. **SQLite Storage** - Agno's Agent has no default persistence. Without explicit
   storage, session_id is ignored and every request is stateless. The SQLite
   session table is the server-held conversation context; a client resets it by
   switching to a new session id.

2. **Singleton Pattern** - Agent initialization is expensive (model client,
   storage connection). The singleton reuses one agent across requests.

3. **Service Wrapper** - Decouples the API from Agno's interface so API changes
   in Agno are fixed in one place.

4. **Explicit num_history_messages** - 20 messages (~10 turns) of context.

5. **Images via the OpenAI Images API** - Image requests are one-shot and need no
   history, so they go straight to the Images endpoint and come back as a
   self-describing data URI the UI can render without a second fetch.
"""

import logging
from collections.abc import AsyncGenerator
from pathlib import Path

from agno.agent import Agent
from agno.db.sqlite import SqliteDb
from agno.models.openai import OpenAIChat
from openai import AsyncOpenAI

from src.agent.config import AgentConfig, get_agent_config

logger = logging.getLogger(__name__)

# Store sessions in project data directory
_DATA_DIR = Path(__file__).parent.parent.parent / "data"
_SESSIONS_DB = _DATA_DIR / "sessions.db"


class AgentService:
    """Service for managing the Agno chat agent and image generation.

    Wraps Agno's Agent with:
    - Persistent SQLite storage for session history
    - Singleton lifecycle management
    - Clean streaming interface for SSE endpoints
    - One-shot image generation returning data URIs
    """

    def __init__(self, config: AgentConfig | None = None) -> None:
        """Initialize the agent service.

        Args:
            config: Optional agent configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_agent_config()
        self._storage = self._create_storage()
        self._agent = self._create_agent()
        self._images = AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=self._config.base_url,
        )

    def _create_storage(self) -> SqliteDb:
        """Create SQLite storage for session persistence.

        Returns:
            Configured SqliteDb instance.
        """
        _DATA_DIR.mkdir(parents=True, exist_ok=True)
        return SqliteDb(
            db_file=str(_SESSIONS_DB),
            session_table="chat_sessions",
        )

    def _create_agent(self) -> Agent:
        """Create the Agno agent instance.

        Returns:
            Configured Agent with OpenAI model and SQLite storage.
        """
        model = OpenAIChat(
            id=self._config.model_name,
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            temperature=self._config.temperature,
            max_tokens=self._config.max_tokens,
        )

        return Agent(
            model=model,
            db=self._storage,
            description="A helpful, concise conversational assistant.",
            instructions=[
                "Provide helpful and accurate responses.",
                "Answer in the language the user writes in.",
                "Be concise yet thorough.",
            ],
            # History config: include last 20 messages (~10 conversation turns)
            add_history_to_context=True,
            num_history_messages=20,
            # Output as markdown for rich formatting in UI
            markdown=True,
        )

    async def stream_response(
        self,
        message: str,
        session_id: str,
    ) -> AsyncGenerator[str]:
        """Stream response chunks for a message.

        Yields response tokens as they arrive. Agno maintains conversation
        history per session. Model errors propagate to the caller.

        Args:
            message: The user's message.
            session_id: Session identifier for history tracking.

        Yields:
            Response text chunks as they arrive.
        """
        response_stream = self._agent.arun(
            message,
            session_id=session_id,
            stream=True,
        )

        async for chunk in response_stream:
            if hasattr(chunk, "content") and chunk.content:
                yield chunk.content

    async def generate_image(self, prompt: str) -> str | None:
        """Generate an image for a prompt.

        Args:
            prompt: The user's full request text.

        Returns:
            A ``data:image/png;base64,...`` URI, or None if the model returned
            no image data.
        """
        response = await self._images.images.generate(
            model=self._config.image_model,
            prompt=prompt,
            n=1,
            size=self._config.image_size,
            response_format="b64_json",
        )

        if not response.data or not response.data[0].b64_json:
            logger.warning(f"No image data returned for prompt of {len(prompt)} chars")
            return None

        return f"data:image/png;base64,{response.data[0].b64_json}"


# Module-level singleton instance
_agent_service: AgentService | None = None


def get_agent_service() -> AgentService:
    """Get or create the global agent service.

    Uses singleton pattern for resource efficiency.

    Returns:
        The AgentService instance.
    """
    global _agent_service
    if _agent_service is None:
        _agent_service = AgentService()
    return _agent_service
