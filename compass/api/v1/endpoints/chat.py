# The module is to define the API endpoints for chat interactions.
# Date: 2026-10-19
# Version: 0.2.0

from fastapi import APIRouter, Depends, HTTPException
from compass.api.deps import get_session_manager, state_response
from compass.models.api_models import ChatRequest, ChatResponse, TranscriptResponse
from compass.services.session_manager import SessionManager
from compass.utils.logger import console

router = APIRouter()

@router.post("/",
          response_model=ChatResponse)
async def chat_with_advisor(request: ChatRequest, sessions: SessionManager = Depends(get_session_manager)):
    """
    Handles a single turn in a conversation and returns the transcript entries it added.
    """
    console.info(f"Received chat request for session_id: {request.session_id}")
    widget = sessions.get_widget(request.session_id)
    if widget is None:
        raise HTTPException(status_code=404, detail=f"Session '{request.session_id}' not found.")

    before = len(widget.state.messages)
    accepted = await widget.send_message(request.user_input)
    await sessions.save_transcript(widget)

    console.success(f"Sending response for session_id: {request.session_id}")
    return ChatResponse(
        session_id=widget.session_id,
        accepted=accepted,
        messages=widget.state.messages[before:],
        state=state_response(widget),
    )

@router.get("/{session_id}/history",
          response_model=TranscriptResponse)
async def get_history(session_id: str, sessions: SessionManager = Depends(get_session_manager)):
    transcript = await sessions.get_transcript(session_id)
    if transcript is None:
        raise HTTPException(status_code=404, detail=f"No transcript for session '{session_id}'.")
    return TranscriptResponse(**transcript.model_dump())
