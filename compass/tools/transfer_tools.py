# Tools for transfer pathways and articulation agreement documents.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState

# --- Tool 1: Transfer options ---

class TransferOptionsInput(BaseModel):
    """Input model for the transfer options tool."""
    major: str = Field(..., description='The student\'s major, e.g., "Computer Science".')
    targetUniversity: str = Field(..., description='The university the student wants to transfer to, e.g., "Florida International University".')


class GetTransferOptionsTool(BaseTool):
    name = ToolName.GET_TRANSFER_OPTIONS
    description = (
        "Provides information about transfer programs from Miami Dade College (MDC) to another university "
        "for a specific major."
    )
    args_schema: Type[BaseModel] = TransferOptionsInput
    result_field = "options"
    failure_message = "Failed to get transfer options"

    async def execute(self, state: WidgetState, major: str, targetUniversity: str) -> str:
        return await self.services.advisor.get_transfer_options(major, targetUniversity)


# --- Tool 2: Articulation document search ---

class ArticulationSearchInput(BaseModel):
    """Free-form search parameters; every field is optional."""
    model_config = ConfigDict(extra="allow")

    query: Optional[str] = Field(default=None, description="Free-text search terms.")
    college: Optional[str] = Field(default=None, description="The two-year college. Defaults to Miami Dade College.")
    targetUniversity: Optional[str] = Field(default=None, description="The four-year institution.")
    major: Optional[str] = Field(default=None, description="The major or program.")
    maxResults: Optional[int] = Field(default=None, description="The maximum number of documents to return.")


class SearchArticulationDocsTool(BaseTool):
    name = ToolName.SEARCH_COLLEGE_ARTICULATION_DOCS
    description = (
        "Searches for official articulation agreement documents (course equivalency mappings) between a "
        "college and a university. All parameters are optional."
    )
    args_schema: Type[BaseModel] = ArticulationSearchInput
    result_field = "results"
    failure_message = "Failed to search articulation documents"

    async def execute(self, state: WidgetState, **params) -> List[Dict[str, str]]:
        return await self.services.advisor.search_college_articulation_docs(params)
