# The module wraps the Tavily AI Search API used to ground advisor answers.
# Date: 2026-10-19
# Version: 0.2.0

from typing import Dict, List, Optional
from pydantic import BaseModel
from tavily import AsyncTavilyClient
from compass.core.config import Settings
from compass.utils.logger import console


class SearchResult(BaseModel):
    title: str = "N/A"
    url: str
    content: str = ""


class SearchClient:
    """
    Thin async wrapper over Tavily. Without an API key every search returns
    no results, so answers fall back to the model's own knowledge.
    """
    def __init__(self, settings: Settings, client: Optional[AsyncTavilyClient] = None):
        self._max_results = settings.SEARCH_MAX_RESULTS
        self._client = client
        if self._client is None and settings.TAVILY_API_KEY:
            self._client = AsyncTavilyClient(api_key=settings.TAVILY_API_KEY)
        if self._client is None:
            console.warning("TAVILY_API_KEY is not set. Answers will not be search-grounded.")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def search(self, query: str, max_results: Optional[int] = None) -> List[SearchResult]:
        if self._client is None:
            return []

        console.info(f"Searching the web for: '{query}'")
        response = await self._client.search(
            query=query,
            search_depth="advanced",
            max_results=max_results or self._max_results,
        )
        return self._parse_results(response)

    def _parse_results(self, response: Dict) -> List[SearchResult]:
        results = []
        for result in response.get("results", []):
            if not result.get("url"):
                continue
            results.append(SearchResult(
                title=result.get("title") or "N/A",
                url=result["url"],
                content=result.get("content") or "",
            ))
        return results


def format_results(results: List[SearchResult]) -> str:
    """Formats search results as context for a prompt."""
    if not results:
        return "No search results found."

    formatted_string = ""
    for result in results:
        formatted_string += f"Title: {result.title}\n"
        formatted_string += f"URL: {result.url}\n"
        formatted_string += f"Content Snippet: {result.content}\n---\n"
    return formatted_string.strip()


def format_sources(results: List[SearchResult]) -> str:
    """Markdown list of the sources an answer was grounded on, or an empty string."""
    sources = [f"[{result.title or result.url}]({result.url})" for result in results]
    if not sources:
        return ""
    return "\n\n**Sources:**\n- " + "\n- ".join(sources)
