# Request-scoped access to the services built at startup.
# Date: 2026-10-19
# Version: 0.1.0

from fastapi import HTTPException, Request
from compass.core.widget import WidgetController
from compass.models.api_models import WidgetStateResponse
from compass.services.session_manager import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def require_widget(session_id: str, request: Request) -> WidgetController:
    widget = get_session_manager(request).get_widget(session_id)
    if widget is None:
        raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")
    return widget


def state_response(widget: WidgetController) -> WidgetStateResponse:
    state = widget.state
    return WidgetStateResponse(
        session_id=widget.session_id,
        is_open=state.is_open,
        is_loading=state.is_loading,
        has_document=state.current_document is not None,
        export_status=state.export_status,
    )
