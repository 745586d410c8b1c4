# Tools for tuition and total degree cost estimates.
# Date: 2026-10-19
# Version: 0.1.0

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Type
from .base_tool import BaseTool, ToolName
from compass.models.common import WidgetState

# --- Tool 1: Tuition estimate ---

class TuitionEstimateInput(BaseModel):
    """Input model for the tuition estimate tool."""
    career: str = Field(..., description='The career path to estimate tuition for, e.g., "Nursing".')
    university: Optional[str] = Field(default=None, description='Optional. The name of the university, e.g., "Florida International University". Defaults to "Miami Dade College".')


class GetTuitionEstimateTool(BaseTool):
    name = ToolName.GET_TUITION_ESTIMATE
    description = (
        "Estimates tuition costs for a specific career path at a given university. "
        "Defaults to Miami Dade College if no university is specified."
    )
    args_schema: Type[BaseModel] = TuitionEstimateInput
    result_field = "estimate"
    failure_message = "Failed to get tuition estimate"

    async def execute(self, state: WidgetState, career: str, university: Optional[str] = None) -> str:
        return await self.services.advisor.get_tuition_estimate(career, university)


# --- Tool 2: Total degree cost ---

class DegreeCostInput(BaseModel):
    """Free-form cost parameters; every field is optional."""
    model_config = ConfigDict(extra="allow")

    university: Optional[str] = Field(default=None, description="The institution, e.g., \"Miami Dade College\".")
    degree: Optional[str] = Field(default=None, description='The degree level or name, e.g., "Associate" or "Bachelor of Science in Nursing".')
    years: Optional[str] = Field(default=None, description='How many years of study to cost, e.g., "2".')
    residency: Optional[str] = Field(default=None, description='Residency status, e.g., "in-state" or "out-of-state".')
    adjustInflation: Optional[bool] = Field(default=None, description="Whether to adjust future years for tuition inflation.")


class CalculateDegreeCostTool(BaseTool):
    name = ToolName.CALCULATE_DEGREE_COST
    description = (
        "Calculates the total cost of a degree (tuition, fees, books) at an institution for a number of years. "
        "All parameters are optional."
    )
    args_schema: Type[BaseModel] = DegreeCostInput
    result_field = "costInfo"
    failure_message = "Failed to calculate degree cost"

    async def execute(self, state: WidgetState, **params) -> str:
        return await self.services.advisor.get_degree_cost(params)
