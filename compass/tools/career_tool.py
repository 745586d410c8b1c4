# A tool to analyze a student's interests and skills and suggest career paths.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, Field
from typing import Optional, Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState


class CareerPotentialInput(BaseModel):
    """Input model for the career potential tool."""
    interests: str = Field(..., description="A description of the user's interests, hobbies, and passions.")
    skills: str = Field(..., description="A description of the user's skills, both hard and soft.")
    resumeText: Optional[str] = Field(default=None, description="Optional. The full text of the user's resume for a more detailed analysis.")


class AnalyzeCareerPotentialTool(BaseTool):
    name = ToolName.ANALYZE_CAREER_POTENTIAL
    description = (
        "Analyzes a user's interests, skills, and optional resume to suggest and detail potential career paths. "
        "Use this for broad questions about what career to choose."
    )
    args_schema: Type[BaseModel] = CareerPotentialInput
    result_field = "analysis"
    failure_message = "Failed to analyze career potential"

    async def execute(self, state: WidgetState, interests: str, skills: str, resumeText: Optional[str] = None) -> str:
        return await self.services.advisor.analyze_career_potential(interests, skills, resumeText)
