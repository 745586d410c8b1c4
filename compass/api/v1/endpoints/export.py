# The module is to define the API endpoints for the study plan timeline and PDF export.
# Date: 2026-10-19
# Version: 0.1.0

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse, HTMLResponse
from compass.api.deps import require_widget
from compass.core.widget import WidgetController
from compass.models.api_models import ExportResponse
from compass.tools.pdf_export_tool import NO_DOCUMENT_ERROR

router = APIRouter()

@router.get("/{session_id}/timeline", response_class=HTMLResponse)
def get_timeline(widget: WidgetController = Depends(require_widget)):
    markup = widget.timeline_html()
    if markup is None:
        raise HTTPException(status_code=404, detail=NO_DOCUMENT_ERROR)
    return HTMLResponse(markup)

@router.post("/{session_id}/pdf", response_model=ExportResponse)
async def export_pdf(widget: WidgetController = Depends(require_widget)):
    """
    Renders the current study plan to PDF. A render failure answers 500 with
    a retry hint; the widget's export_status is 'failed' in that case.
    """
    if widget.state.current_document is None:
        raise HTTPException(status_code=404, detail=NO_DOCUMENT_ERROR)
    exported = await widget.export_current_document()
    if exported is None:
        raise HTTPException(status_code=500, detail={"error": "PDF export failed.", "retry": True})
    return ExportResponse(
        session_id=widget.session_id,
        filename=exported.filename,
        pages=exported.pages,
        download_url=f"/v1/export/{widget.session_id}/pdf",
    )

@router.get("/{session_id}/pdf")
def download_pdf(widget: WidgetController = Depends(require_widget)):
    filename = widget.state.last_export_filename
    if filename is None:
        raise HTTPException(status_code=404, detail="No PDF has been exported in this session yet.")
    path = widget.services.exporter.path_for(filename, widget.session_id)
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"'{filename}' is no longer available.")
    return FileResponse(path, media_type="application/pdf", filename=filename)
