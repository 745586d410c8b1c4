# compass/services/advisor.py
# The data-producing operations behind the advisor tools: study plans, costs, reviews, transfers.
# Date: 2026-10-19
# Version: 0.2.0

import json
import re
from typing import Any, Dict, List, Optional
from pydantic import ValidationError
from compass.core.config import Settings
from compass.models.common import StudyPlanDocument
from compass.services.llm_connector import ModelGateway
from compass.services.search_client import SearchClient, format_results, format_sources
from compass.utils.logger import console

_FENCED_JSON = re.compile(r"```(json)?\s*(\{[\s\S]*\})\s*```")

PLAN_FORMAT_ERROR = "Could not generate a valid study plan. The AI returned an unexpected format."

_TERM_FORMAT = (
    'Each term object must have two keys: "term" (string, e.g., "Fall 2024") and "courses" '
    '(an array of strings, where each string includes both the course code and name, e.g., '
    '["COP 1000 - Introduction to Programming"]).'
)


def parse_study_plan(raw_text: str) -> StudyPlanDocument:
    """
    Extracts the study plan JSON from a model reply, which may wrap it in a
    markdown fence or surround it with prose.

    Raises:
        ValueError: The reply holds no valid plan.
    """
    json_text = raw_text or ""
    match = _FENCED_JSON.search(json_text)
    if match and match.group(2):
        json_text = match.group(2)
    else:
        start, end = json_text.find("{"), json_text.rfind("}")
        if start != -1 and end != -1:
            json_text = json_text[start:end + 1]

    try:
        data = json.loads(json_text)
        if not isinstance(data, dict) or not data.get("career") or not isinstance(data.get("plans"), list):
            raise ValueError("Invalid JSON structure received from AI for flowchart.")
        return StudyPlanDocument.model_validate(data)
    except (ValueError, ValidationError) as e:
        console.error(f"Failed to parse flowchart JSON: {e}")
        raise ValueError(PLAN_FORMAT_ERROR) from e


class AdvisorService:
    """
    Each public coroutine performs one external operation for one tool.
    Answers that depend on current real-world data are grounded on a web
    search and end with a markdown list of their sources.
    """
    def __init__(self, settings: Settings, gateway: ModelGateway, search: SearchClient):
        self._gateway = gateway
        self._search = search
        self.home_institution = settings.HOME_INSTITUTION

    async def _grounded_answer(self, prompt: str, query: str) -> str:
        results = await self._search.search(query)
        if results:
            prompt += f"\n\nUse these web search results as your sources:\n{format_results(results)}"
        answer = await self._gateway.generate(prompt)
        return answer + format_sources(results)

    async def get_flowchart_data(self, career: str, start_date: str, courses_per_term: str,
                                 target_university: Optional[str] = None,
                                 bachelors_degree: Optional[str] = None) -> StudyPlanDocument:
        home = self.home_institution
        if target_university:
            degree = bachelors_degree or f"Bachelor's degree in {career}"
            prompt = (
                f"Generate a comprehensive 4-year study plan for a student pursuing a career in {career}. "
                f"The plan should start with a 2-year Associate degree at {home}, beginning in {start_date}, "
                f"and then transfer to {target_university} to complete a {degree}. Follow the official "
                f"curricula, transfer requirements and articulation agreements (such as the 2+2 pathway). "
                f'The student wants to take courses based on this schedule: "{courses_per_term}".\n\n'
                f'The output must be a single JSON object with keys "career" (value: "{career}") and "plans" '
                f'(an array of two degree plan objects). The first has "institution": "{home}", "degree" '
                f'(e.g., "Associate in Arts - {career}") and "timeline" for the first two years. The second has '
                f'"institution": "{target_university}", "degree": "{degree}" and "timeline" for the final two years. '
                f'{_TERM_FORMAT} You may add an optional "extracurriculars" object with "clubs" and "activities" '
                f"arrays of strings.\n\nDo not include any explanatory text, just the raw JSON."
            )
            query = f"{home} {career} associate curriculum transfer {target_university} {degree}"
        else:
            prompt = (
                f"Generate a detailed 2-year Associate degree study plan for a student at {home} pursuing a "
                f"career in {career}, starting in {start_date}. Follow the official {home} curriculum for this "
                f'pathway. The student wants to take courses based on this schedule: "{courses_per_term}".\n\n'
                f'The output must be a single JSON object with keys "career" (value: "{career}") and "plans" '
                f'(an array containing one degree plan object with "institution": "{home}", "degree" '
                f'(e.g., "Associate in Arts - {career}") and "timeline"). {_TERM_FORMAT} You may add an optional '
                f'"extracurriculars" object with "clubs" and "activities" arrays of strings.\n\n'
                f"Do not include any explanatory text, just the raw JSON."
            )
            query = f"{home} {career} associate degree curriculum"

        results = await self._search.search(query)
        if results:
            prompt += f"\n\nCurriculum sources:\n{format_results(results)}"
        raw_text = await self._gateway.generate_plan_text(prompt)
        return parse_study_plan(raw_text)

    async def analyze_career_potential(self, interests: str, skills: str, resume_text: Optional[str] = None) -> str:
        prompt = (
            f"Act as an expert career counselor. A student from {self.home_institution} is seeking guidance. "
            f"Analyze the following profile and provide a detailed career analysis.\n\n"
            f"**Student's Interests:** {interests}\n**Student's Skills:** {skills}\n"
        )
        if resume_text:
            prompt += f"\n**Student's Resume:**\n{resume_text}\n"
        prompt += (
            "\nBased on this profile, suggest 3 to 5 highly relevant career paths. For each path, provide the "
            "career title, why it's a good fit, 2-3 potential starting roles, 3-4 key skills to develop, and the "
            f"educational path at {self.home_institution} including transfer pathways for a Bachelor's degree. "
            "Format your response using clear headings and bullet points in Markdown."
        )
        return await self._gateway.generate(prompt)

    async def get_tuition_estimate(self, career: str, university: Optional[str] = None) -> str:
        target = university or self.home_institution
        degree_type = "an Associate's degree" if target == self.home_institution else "a Bachelor's degree"
        prompt = (
            f'As a career advisor, provide a detailed estimate of tuition costs for a student pursuing {degree_type} '
            f'for a "{career}" career path at {target}. Break down the costs if possible (e.g., in-state vs. '
            f"out-of-state, per credit hour, fees). Present the information clearly."
        )
        return await self._grounded_answer(prompt, f"{target} tuition per credit hour {career}")

    async def get_course_summary(self, career: str, course_name: str) -> str:
        prompt = (
            f'Provide a detailed summary for the course "{course_name}" in the context of a "{career}" degree. '
            f"Cover prerequisites, main topics covered, typical difficulty, and what students will learn."
        )
        return await self._grounded_answer(prompt, f"{course_name} course {career} prerequisites topics")

    async def get_teacher_reviews(self, teacher_name: str, course_name: Optional[str] = None) -> str:
        prompt = f'Find reviews for professor "{teacher_name}" from "{self.home_institution}".'
        if course_name:
            prompt += f' Specifically in relation to the course "{course_name}".'
        prompt += (
            " Summarize the reviews found on websites like Rate My Professor. Focus on teaching style, overall "
            "quality, difficulty, and common student comments. If available, include their rating."
        )
        return await self._grounded_answer(prompt, f"{teacher_name} {self.home_institution} Rate My Professor")

    async def find_teachers(self, sort_by: str, course_name: Optional[str] = None) -> str:
        prompt = f'Find professors at "{self.home_institution}" with the {sort_by}'
        if course_name:
            prompt += f' for the course "{course_name}"'
        prompt += (
            ". List the top 3-5 teachers found on sites like Rate My Professor, including their rating and a "
            "brief summary of their reviews. Format the response as a clear, easy-to-read list."
        )
        query = f"{self.home_institution} professors {sort_by} {course_name or ''} Rate My Professor"
        return await self._grounded_answer(prompt, query.replace("  ", " "))

    async def get_transfer_options(self, major: str, target_university: str) -> str:
        prompt = (
            f"Provide detailed information about the transfer options and agreements between "
            f"{self.home_institution} and {target_university} for a student with an Associate in Arts degree "
            f"majoring in {major}. Include details on articulation agreements, required GPA, and any specific "
            f"prerequisite courses."
        )
        return await self._grounded_answer(
            prompt, f"{self.home_institution} {target_university} transfer {major} articulation agreement"
        )

    async def get_degree_cost(self, params: Dict[str, Any]) -> str:
        university = params.get("university") or self.home_institution
        degree = params.get("degree") or "degree"
        prompt = f"Estimate the total cost of completing a {degree} at {university}"
        if params.get("years"):
            prompt += f" over {params['years']} years"
        if params.get("residency"):
            prompt += f" for a {params['residency']} student"
        prompt += ". Include tuition, fees, and books per year and in total."
        if params.get("adjustInflation"):
            prompt += " Adjust future years for expected tuition inflation."
        prompt += " Keep the answer to a short summary with the final totals."
        return await self._grounded_answer(prompt, f"{university} {degree} cost of attendance tuition fees")

    async def search_college_articulation_docs(self, params: Dict[str, Any]) -> List[Dict[str, str]]:
        terms = [
            params.get("query"),
            params.get("college") or self.home_institution,
            params.get("targetUniversity"),
            params.get("major"),
            "articulation agreement",
        ]
        query = " ".join(term for term in terms if term)
        results = await self._search.search(query, max_results=params.get("maxResults"))
        return [{"title": r.title, "url": r.url, "snippet": r.content} for r in results]
