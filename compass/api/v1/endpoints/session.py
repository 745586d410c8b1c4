# The module is to define the API endpoints for session management.
# Date: 2026-10-19
# Version: 0.3.0

from fastapi import APIRouter, Depends, HTTPException
from compass.api.deps import get_session_manager, state_response
from compass.models.api_models import NewSessionResponse
from compass.services.session_manager import SessionManager

router = APIRouter()

@router.post("/new",
          response_model=NewSessionResponse)
def create_new_session(sessions: SessionManager = Depends(get_session_manager)):
    """
    Creates a new chat widget and returns its session ID.
    """
    widget = sessions.create_widget()
    return NewSessionResponse(
        session_id=widget.session_id,
        message="New session created successfully.",
        state=state_response(widget),
    )

@router.delete("/{session_id}")
def delete_session(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
    """
    Drops the live widget. An archived transcript stays readable until it expires.
    """
    if not sessions.drop_widget(session_id):
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")
    return {"session_id": session_id, "message": "Session closed."}
