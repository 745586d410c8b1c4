# The module is to define the API router for the application.
# Date: 2026-10-19
# Version: 0.2.0

from fastapi import APIRouter
from compass.api.v1.endpoints import session, chat, widget, export

api_router = APIRouter()

# Include the session router with a '/session' prefix
api_router.include_router(session.router, prefix="/session", tags=["Session Management"])

# Include the chat router with a '/chat' prefix
api_router.include_router(chat.router, prefix="/chat", tags=["Conversation"])

# Include the widget router with a '/widget' prefix
api_router.include_router(widget.router, prefix="/widget", tags=["Widget"])

# Include the export router with a '/export' prefix
api_router.include_router(export.router, prefix="/export", tags=["Study Plan Export"])
