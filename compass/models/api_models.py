# The module is to define the API models for the widget endpoints.
# Date: 2026-10-19
# Version: 0.2.0

from pydantic import BaseModel, Field
from typing import List, Optional
from compass.models.common import ChatMessage, ExportStatus


class ChatRequest(BaseModel):
    """
    Defines the request body for the /v1/chat endpoint.
    Attributes:
        session_id (str): The unique ID of the widget session.
        user_input (str): The user's text input.
    """
    session_id: str = Field(..., description="The unique ID of the widget session.")
    user_input: str = Field(..., description="The user's text input.")


class CareerRequest(BaseModel):
    career: str = Field(..., description='The career the student clicked on, e.g., "Nursing".')


class WidgetStateResponse(BaseModel):
    session_id: str
    is_open: bool
    is_loading: bool
    has_document: bool
    export_status: ExportStatus


class ChatResponse(BaseModel):
    """
    Defines the response body for the /v1/chat endpoint.
    Attributes:
        session_id (str): The unique ID of the widget session.
        accepted (bool): False when the message was ignored (empty input or a send in progress).
        messages (List[ChatMessage]): The transcript entries added by this request.
        state (WidgetStateResponse): The widget state after the exchange.
    """
    session_id: str
    accepted: bool
    messages: List[ChatMessage]
    state: WidgetStateResponse


class TranscriptResponse(BaseModel):
    session_id: str
    messages: List[ChatMessage]
    current_career: Optional[str] = None


class ExportResponse(BaseModel):
    session_id: str
    filename: str
    pages: int
    download_url: str


class NewSessionResponse(BaseModel):
    """
    Defines the response body for the /v1/session/new endpoint.
    """
    session_id: str
    message: str
    state: WidgetStateResponse
