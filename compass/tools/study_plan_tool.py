# A tool to generate a 2-year or 4-year study plan flowchart.
# Date: 2026-10-19
# Version: 0.2.0

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional, Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState
from compass.utils.logger import console


class StudyFlowchartInput(BaseModel):
    """Input model for the study flowchart tool."""
    career: str = Field(..., description='The desired career path or major, e.g., "Software Engineering".')
    startDate: str = Field(..., description='The desired start date for studies, e.g., "Fall 2024".')
    coursesPerTerm: str = Field(..., description='The number of courses the student wants to take per term. e.g., "3", or "4 in fall, 2 in summer".')
    targetUniversity: Optional[str] = Field(default=None, description="Optional. The university the student wants to transfer to for a Bachelor's degree, e.g., \"Florida International University\".")
    bachelorsDegree: Optional[str] = Field(default=None, description="Optional. The specific Bachelor's degree, e.g., \"Bachelor of Science in Computer Science\".")


class GenerateStudyFlowchartTool(BaseTool):
    """
    Generates the study plan and stores it as the widget's current document.
    A cost estimate for the home institution is attached when available.
    Failures are raised so the dispatcher reports them to the user right away.
    """
    name = ToolName.GENERATE_STUDY_FLOWCHART
    description = (
        "Generates a 2-year or 4-year flowchart of courses. It creates a 2-year plan for an Associate degree "
        "at Miami Dade College (MDC). If a target university and bachelor's degree are provided, it extends "
        "the plan to a full 4-year timeline including the transfer path."
    )
    args_schema: Type[BaseModel] = StudyFlowchartInput
    result_field = None
    propagate_errors = True

    async def execute(self, state: WidgetState, career: str, startDate: str, coursesPerTerm: str,
                      targetUniversity: Optional[str] = None,
                      bachelorsDegree: Optional[str] = None) -> Dict[str, Any]:
        advisor = self.services.advisor
        document = await advisor.get_flowchart_data(
            career, startDate, coursesPerTerm, targetUniversity, bachelorsDegree
        )

        is_associate_only = not targetUniversity

        cost_info = None
        try:
            cost_info = await advisor.get_degree_cost({
                "university": advisor.home_institution,
                "degree": "Associate" if is_associate_only else None,
                "years": "2" if is_associate_only else None,
                "adjustInflation": False,
            })
            console.info(f"Retrieved cost information for {advisor.home_institution}.")
        except Exception as e:
            console.warning(f"Failed to retrieve cost information: {e}")

        message = (
            f"I've generated a {'2-year' if is_associate_only else '4-year'} study plan for {career}. "
            f"The plan includes {len(document.plans)} degree plan(s) with detailed course timelines."
        )
        if cost_info:
            message += f"\n\n{cost_info}"

        state.current_document = document
        return {
            "success": True,
            "data": document.model_dump(),
            "costInfo": cost_info,
            "message": message,
        }
