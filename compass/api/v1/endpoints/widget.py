# The module is to define the API endpoints that drive the widget's open/closed state.
# Date: 2026-10-19
# Version: 0.1.0

from fastapi import APIRouter, Depends
from compass.api.deps import get_session_manager, require_widget, state_response
from compass.core.widget import WidgetController
from compass.models.api_models import CareerRequest, ChatResponse, WidgetStateResponse
from compass.services.session_manager import SessionManager
from compass.utils.logger import console

router = APIRouter()

@router.post("/{session_id}/open", response_model=WidgetStateResponse)
def open_widget(widget: WidgetController = Depends(require_widget)):
    widget.open()
    return state_response(widget)

@router.post("/{session_id}/close", response_model=WidgetStateResponse)
def close_widget(widget: WidgetController = Depends(require_widget)):
    widget.close()
    return state_response(widget)

@router.post("/{session_id}/toggle", response_model=WidgetStateResponse)
def toggle_widget(widget: WidgetController = Depends(require_widget)):
    widget.toggle()
    return state_response(widget)

@router.post("/{session_id}/career", response_model=ChatResponse)
async def open_with_career(request: CareerRequest,
                           widget: WidgetController = Depends(require_widget),
                           sessions: SessionManager = Depends(get_session_manager)):
    """
    Opens the widget and asks for a study plan for the selected career.
    """
    console.info(f"Career '{request.career}' selected in session '{widget.session_id}'.")
    before = len(widget.state.messages)
    accepted = await widget.open_with_career(request.career)
    await sessions.save_transcript(widget)
    return ChatResponse(
        session_id=widget.session_id,
        accepted=accepted,
        messages=widget.state.messages[before:],
        state=state_response(widget),
    )
