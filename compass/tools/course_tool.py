# A tool to summarize a course within a career path.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, Field
from typing import Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState


class CourseSummaryInput(BaseModel):
    """Input model for the course summary tool."""
    career: str = Field(..., description='The career path the course belongs to, e.g., "Computer Science".')
    courseName: str = Field(..., description='The name of the course to summarize, e.g., "Data Structures and Algorithms".')


class GetCourseSummaryTool(BaseTool):
    name = ToolName.GET_COURSE_SUMMARY
    description = (
        "Provides a summary for a specific course within a career path, with details like prerequisites, "
        "topics covered, and difficulty."
    )
    args_schema: Type[BaseModel] = CourseSummaryInput
    result_field = "summary"
    failure_message = "Failed to get course summary"

    async def execute(self, state: WidgetState, career: str, courseName: str) -> str:
        return await self.services.advisor.get_course_summary(career, courseName)
