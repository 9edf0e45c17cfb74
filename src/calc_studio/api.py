"""
FastAPI application and API routes for Calc Studio.

Every session owns one calculator; clients post key names and render the
snapshot returned after each request.
"""

from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Path
from fastapi.middleware.cors import CORSMiddleware

from calc_studio import __version__
from calc_studio.config import settings
from calc_studio.exceptions import TokenError
from calc_studio.logging_config import setup_logging
from calc_studio.models import HistoryEntry, InputRequest, SessionSnapshot
from calc_studio.sessions import Session, SessionNotFoundError, SessionStore, get_session_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging(settings.log_level, settings.log_json)
    yield


app = FastAPI(
    title="Calc Studio",
    description="Scientific calculator engine over HTTP",
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_session(
    session_id: UUID,
    store: SessionStore = Depends(get_session_store),
) -> Session:
    """Resolve a session from the path or fail with 404."""
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/api/v1/config")
async def get_config(store: SessionStore = Depends(get_session_store)):
    """Get public configuration."""
    return {
        "app_name": settings.app_name,
        "history_capacity": store.config.history_capacity,
        "factorial_limit": store.config.factorial_limit,
        "error_sentinel": store.config.error_sentinel,
        "max_sessions": store.max_sessions,
    }


# =============================================================================
# Sessions API
# =============================================================================

@app.get("/api/v1/sessions", response_model=list[UUID])
async def list_sessions(store: SessionStore = Depends(get_session_store)):
    """List live session ids, oldest first."""
    return store.ids()


@app.post("/api/v1/sessions", response_model=SessionSnapshot, status_code=201)
async def create_session(store: SessionStore = Depends(get_session_store)):
    """Start a session with a fresh calculator."""
    return store.create().snapshot()


@app.get("/api/v1/sessions/{session_id}", response_model=SessionSnapshot)
async def get_session_snapshot(session: Session = Depends(get_session)):
    """Get the current snapshot of a session."""
    return session.snapshot()


@app.delete("/api/v1/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: UUID,
    store: SessionStore = Depends(get_session_store),
):
    """Discard a session."""
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


@app.post("/api/v1/sessions/{session_id}/input", response_model=SessionSnapshot)
async def press_keys(
    request: InputRequest,
    session: Session = Depends(get_session),
):
    """
    Apply key names to a session in order.

    The request is all-or-nothing: an unknown key leaves the session untouched.
    """
    try:
        session.calculator.press_many(request.tokens)
    except TokenError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return session.snapshot()


# =============================================================================
# History API
# =============================================================================

@app.get("/api/v1/sessions/{session_id}/history", response_model=list[HistoryEntry])
async def get_history(session: Session = Depends(get_session)):
    """List history entries, newest first."""
    return list(session.calculator.state.history)


@app.post("/api/v1/sessions/{session_id}/history/{index}/recall", response_model=SessionSnapshot)
async def recall_history(
    index: int = Path(..., ge=0),
    session: Session = Depends(get_session),
):
    """Put a history entry's result on the display."""
    try:
        session.calculator.recall_history_entry(index)
    except TokenError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.snapshot()


@app.delete("/api/v1/sessions/{session_id}/history", response_model=SessionSnapshot)
async def clear_history(session: Session = Depends(get_session)):
    """Empty a session's history."""
    session.calculator.clear_history()
    return session.snapshot()
