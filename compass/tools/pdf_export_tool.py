# A tool to export the current study plan as a downloadable PDF.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, Field
from typing import Any, Dict, Type
from .base_tool import BaseTool, ToolName
from compass.core.errors import RenderError
from compass.models.common import WidgetState
from compass.utils.logger import console

NO_DOCUMENT_ERROR = "No flowchart data available to export. Please generate a study plan first."


class PdfExportInput(BaseModel):
    """Input model for the PDF export tool."""
    content: str = Field(..., description="The text content to be included in the PDF.")


class OfferPdfExportTool(BaseTool):
    """
    Rasterizes the current study plan into a paginated PDF. Without a plan it
    answers with a structured failure and renders nothing.
    """
    name = ToolName.OFFER_PDF_EXPORT
    description = (
        "Presents the user with options to download content as a PDF. Use this when the user wants to "
        "save or share a summary."
    )
    args_schema: Type[BaseModel] = PdfExportInput
    result_field = None
    failure_message = "Failed to export the study plan"

    async def execute(self, state: WidgetState, content: str = "") -> Dict[str, Any]:
        document = state.current_document
        if document is None:
            console.warning("PDF export requested before any study plan was generated.")
            return {"success": False, "error": NO_DOCUMENT_ERROR}

        state.export_status = "exporting"
        try:
            exported = await self.services.exporter.export(document, state.session_id)
        except RenderError:
            state.export_status = "failed"
            raise

        state.export_status = "ready"
        state.last_export_filename = exported.filename
        return {
            "success": True,
            "filename": exported.filename,
            "pages": exported.pages,
            "message": f"The study plan PDF '{exported.filename}' ({exported.pages} page(s)) is ready to download.",
        }
