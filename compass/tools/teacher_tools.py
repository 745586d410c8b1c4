# Tools to look up instructor reviews and rank instructors.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, Field
from typing import Optional, Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState

# --- Tool 1: Reviews for one instructor ---

class TeacherReviewsInput(BaseModel):
    """Input model for the teacher reviews tool."""
    teacherName: str = Field(..., description="The name of the teacher to look up.")
    courseName: Optional[str] = Field(default=None, description="Optional. The name of the course the teacher teaches.")


class GetTeacherReviewsTool(BaseTool):
    name = ToolName.GET_TEACHER_REVIEWS
    description = "Fetches reviews for a specific teacher at Miami Dade College from sources like Rate My Professor."
    args_schema: Type[BaseModel] = TeacherReviewsInput
    result_field = "reviews"
    failure_message = "Failed to get teacher reviews"

    async def execute(self, state: WidgetState, teacherName: str, courseName: Optional[str] = None) -> str:
        return await self.services.advisor.get_teacher_reviews(teacherName, courseName)


# --- Tool 2: Ranked instructors ---

class FindTeachersInput(BaseModel):
    """Input model for the find teachers tool."""
    sortBy: str = Field(..., description='The criteria to sort teachers by. e.g., "highest score", "most reviews".')
    courseName: Optional[str] = Field(default=None, description="Optional. The name of the course to filter teachers by.")


class FindTeachersTool(BaseTool):
    name = ToolName.FIND_TEACHERS
    description = (
        "Finds teachers at Miami Dade College based on specific criteria, such as the highest review score "
        "or most reviews. Can be filtered by course name."
    )
    args_schema: Type[BaseModel] = FindTeachersInput
    result_field = "teachers"
    failure_message = "Failed to find teachers"

    async def execute(self, state: WidgetState, sortBy: str, courseName: Optional[str] = None) -> str:
        return await self.services.advisor.find_teachers(sortBy, courseName)
