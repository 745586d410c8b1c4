"""
Tests for study plan parsing and the search-grounded advisor operations.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest

from compass.services.advisor import PLAN_FORMAT_ERROR, AdvisorService, parse_study_plan
from compass.services.search_client import SearchClient, format_sources

from conftest import make_settings, run

PLAN = {
    "career": "Nursing",
    "plans": [{
        "institution": "Miami Dade College",
        "degree": "Associate in Science - Nursing",
        "timeline": [{"term": "Fall 2025", "courses": ["BSC 2085 - Anatomy & Physiology I"]}],
    }],
}


def tavily_results(*results):
    client = Mock()
    client.search = AsyncMock(return_value={"results": list(results)})
    return client


def make_advisor(gateway, tavily=None):
    settings = make_settings()
    return AdvisorService(settings, gateway, SearchClient(settings, client=tavily))


def test_parse_fenced_plan():
    doc = parse_study_plan(f"Here you go:\n```json\n{json.dumps(PLAN)}\n```")
    assert doc.career == "Nursing"
    assert doc.plans[0].timeline[0].courses == ["BSC 2085 - Anatomy & Physiology I"]
    assert doc.extracurriculars is None


def test_parse_plan_surrounded_by_prose():
    doc = parse_study_plan(f"Sure! {json.dumps(PLAN)} Good luck!")
    assert doc.plans[0].institution == "Miami Dade College"


@pytest.mark.parametrize("raw", [
    "I cannot help with that.",
    '{"career": "Nursing"}',
    '{"plans": []}',
    '{"career": "Nursing", "plans": [{"institution": "MDC"}]}',
])
def test_unusable_plans_raise_format_error(raw):
    with pytest.raises(ValueError, match="Could not generate a valid study plan"):
        parse_study_plan(raw)
    assert PLAN_FORMAT_ERROR.startswith("Could not generate a valid study plan")


def test_two_year_plan_prompt():
    gateway = Mock()
    gateway.generate_plan_text = AsyncMock(return_value=json.dumps(PLAN))
    advisor = make_advisor(gateway)

    doc = run(advisor.get_flowchart_data("Nursing", "Fall 2025", "4"))

    prompt = gateway.generate_plan_text.await_args.args[0]
    assert doc.career == "Nursing"
    assert "2-year Associate degree" in prompt
    assert "Fall 2025" in prompt


def test_four_year_plan_defaults_bachelors_degree():
    gateway = Mock()
    gateway.generate_plan_text = AsyncMock(return_value=json.dumps(PLAN))
    advisor = make_advisor(gateway)

    run(advisor.get_flowchart_data("Nursing", "Fall 2025", "4", target_university="Florida International University"))

    prompt = gateway.generate_plan_text.await_args.args[0]
    assert "4-year study plan" in prompt
    assert "Florida International University" in prompt
    assert "Bachelor's degree in Nursing" in prompt


def test_grounded_answer_lists_sources():
    gateway = Mock()
    gateway.generate = AsyncMock(return_value="About $120 per credit hour.")
    tavily = tavily_results(
        {"title": "MDC Tuition", "url": "https://www.mdc.edu/tuition", "content": "In-state: $118.22"},
        {"title": "No URL", "url": "", "content": "skipped"},
    )
    advisor = make_advisor(gateway, tavily)

    answer = run(advisor.get_tuition_estimate("Nursing"))

    assert answer == "About $120 per credit hour.\n\n**Sources:**\n- [MDC Tuition](https://www.mdc.edu/tuition)"
    prompt = gateway.generate.await_args.args[0]
    assert "an Associate's degree" in prompt
    assert "In-state: $118.22" in prompt
    assert tavily.search.await_args.kwargs["search_depth"] == "advanced"


def test_answers_without_search_key_have_no_sources():
    gateway = Mock()
    gateway.generate = AsyncMock(return_value="Prof. Smith is well liked.")
    advisor = make_advisor(gateway)

    assert run(advisor.get_teacher_reviews("Smith", "Calculus I")) == "Prof. Smith is well liked."
    assert format_sources([]) == ""


def test_articulation_search_builds_query():
    tavily = tavily_results({"title": "FIU 2+2", "url": "https://fiu.edu/2plus2", "content": "Pathway"})
    advisor = make_advisor(Mock(), tavily)

    docs = run(advisor.search_college_articulation_docs(
        {"targetUniversity": "FIU", "major": "Biology", "maxResults": 3}
    ))

    assert docs == [{"title": "FIU 2+2", "url": "https://fiu.edu/2plus2", "snippet": "Pathway"}]
    kwargs = tavily.search.await_args.kwargs
    assert kwargs["query"] == "Miami Dade College FIU Biology articulation agreement"
    assert kwargs["max_results"] == 3


def test_degree_cost_prompt_includes_params():
    gateway = Mock()
    gateway.generate = AsyncMock(return_value="Roughly $7,000.")
    advisor = make_advisor(gateway)

    run(advisor.get_degree_cost({"degree": "Associate", "years": "2", "adjustInflation": True}))

    prompt = gateway.generate.await_args.args[0]
    assert "Associate at Miami Dade College over 2 years" in prompt
    assert "inflation" in prompt
