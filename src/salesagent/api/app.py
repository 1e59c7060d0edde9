"""
Core API backend for salesagent.

This module exposes the tool protocol and the conversation state machine over HTTP:
- **GET /health**  - liveness probe for health checks.
- **GET /tools** / **POST /tools/{name}** - list tools / invoke one through the dispatcher.
- **POST /agent** - the local agent, reachable like a remote agent endpoint.
- **POST /sessions** - create a conversation; **GET /sessions** - list them.
- **GET /sessions/{id}/turns** - transcript snapshot.
- **POST /sessions/{id}/messages** - user message: {"text": "..."}
- **POST /sessions/{id}/actions** - widget action: {"tool_name": "...", "args": {...}}
- **DELETE /sessions/{id}** - tear the conversation down.
"""

import logging
import uuid
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Any,
    Dict,
    List,
    Mapping,
)

from fastapi import (
    FastAPI,
    HTTPException,
)
from fastapi.middleware.cors import CORSMiddleware

from salesagent.agent.agent_client import (
    LocalAgent,
    load_agent,
)
from salesagent.agent.orchestrator import (
    ConversationBusy,
    TurnOrchestrator,
)
from salesagent.agent.tool_executor import dispatch
from salesagent.api.models import (
    MessageRequest,
    SessionResponse,
    ToolInvocationRequest,
    TurnResponse,
    WidgetActionRequest,
)
from salesagent.common import (
    AnsiColors,
    colored_print,
)
from salesagent.config import settings
from salesagent.core.events import (
    ChannelClosed,
    WidgetActionChannel,
)
from salesagent.core.schema import (
    AgentRequest,
    ContentEnvelope,
)
from salesagent.tools import TOOL_REGISTRY

logger = logging.getLogger(__name__)


@dataclass
class ConversationSession:
    """One live conversation: its orchestrator and the channel its widgets emit on."""

    session_id: str
    orchestrator: TurnOrchestrator
    channel: WidgetActionChannel = field(default_factory=WidgetActionChannel)

    def close(self) -> None:
        self.orchestrator.close()


# Session storage (in-memory only, conversations end with the process)
sessions: Dict[str, ConversationSession] = {}

app = FastAPI(
    title="salesagent API",
    version="0.1.0",
    description="Tool protocol and conversation orchestration for the security sales agent",
)

# Add CORS middleware to allow requests from a browser front-end
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        f"http://localhost:{settings.API_PORT}",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------
def create_session() -> ConversationSession:
    """Create a conversation with a fresh orchestrator bound to its own widget channel."""
    session_id = str(uuid.uuid4())
    orchestrator = TurnOrchestrator(
        agent=load_agent(),
        greeting=settings.GREETING,
        timeout=settings.AGENT_TIMEOUT,
    )
    session = ConversationSession(session_id=session_id, orchestrator=orchestrator)
    orchestrator.bind(session.channel)
    sessions[session_id] = session
    logger.info("Created session %s", session_id)
    return session


def get_session(session_id: str) -> ConversationSession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session '{session_id}'")
    return session


def _session_response(session: ConversationSession) -> SessionResponse:
    orchestrator = session.orchestrator
    return SessionResponse(
        session_id=session.session_id,
        state=orchestrator.state.value,
        turns=list(orchestrator.store.snapshot()),
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.get("/", summary="API root")
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": "Welcome to the salesagent API! Use /docs for API documentation."}


@app.get("/tools", summary="List tools")
async def list_tools() -> Mapping[str, Dict[str, Any]]:
    """Return every registered tool with its input schema."""
    return TOOL_REGISTRY.schemas()


@app.post("/tools/{name}", response_model=ContentEnvelope, summary="Invoke a tool")
async def invoke_tool(name: str, req: ToolInvocationRequest) -> ContentEnvelope:
    """Dispatch a tool call; failures come back as error content, not HTTP errors."""
    return dispatch(name, req.input)


@app.post("/agent", summary="Local agent endpoint")
async def agent_endpoint(req: AgentRequest) -> Mapping[str, Any]:
    """Answer an agent-boundary request with the in-process keyword agent."""
    return await LocalAgent().send(req)


@app.post("/sessions", response_model=SessionResponse, summary="Create a new session")
async def create_session_endpoint() -> SessionResponse:
    """Create a new conversation session."""
    return _session_response(create_session())


@app.get("/sessions", response_model=List[str], summary="List active sessions")
async def list_sessions() -> List[str]:
    """List all active session IDs."""
    return list(sessions.keys())


@app.get("/sessions/{session_id}/turns", response_model=SessionResponse, summary="Transcript")
async def get_turns(session_id: str) -> SessionResponse:
    """Return the latest transcript snapshot."""
    return _session_response(get_session(session_id))


@app.post(
    "/sessions/{session_id}/messages", response_model=TurnResponse, summary="Send a message"
)
async def post_message(session_id: str, req: MessageRequest) -> TurnResponse:
    """Submit a user message and wait for the agent's reply turn."""
    session = get_session(session_id)
    try:
        reply = await session.orchestrator.submit(req.text)
    except ConversationBusy as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return TurnResponse(
        session_id=session_id, reply=reply, turns=list(session.orchestrator.store.snapshot())
    )


@app.post(
    "/sessions/{session_id}/actions", response_model=TurnResponse, summary="Trigger widget action"
)
async def post_action(session_id: str, req: WidgetActionRequest) -> TurnResponse:
    """Route a widget action back into the conversation as a new turn."""
    session = get_session(session_id)
    try:
        reply = await session.channel.emit(req.tool_name, req.args)
    except ConversationBusy as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ChannelClosed as exc:
        raise HTTPException(status_code=410, detail=str(exc)) from exc
    return TurnResponse(
        session_id=session_id, reply=reply, turns=list(session.orchestrator.store.snapshot())
    )


@app.delete("/sessions/{session_id}", summary="Close a session")
async def delete_session(session_id: str) -> dict[str, str]:
    """Unbind the session's orchestrator and forget the conversation."""
    session = get_session(session_id)
    session.close()
    del sessions[session_id]
    logger.info("Closed session %s", session_id)
    return {"status": "closed", "session_id": session_id}


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg-import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting salesagent API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    logger.debug("API settings: %s", settings.model_dump())

    colored_print(f"salesagent API is running at http://localhost:{port}.", AnsiColors.GREEN)
    colored_print(f"Visit http://localhost:{port}/docs for API documentation.", AnsiColors.BLUE)
    uvicorn.run(
        "salesagent.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m salesagent.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
