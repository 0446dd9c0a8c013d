# app/services/search.py
"""
Web search execution with DuckDuckGo HTML scraping and a stub fallback.

SEARCH_PROVIDER selects the strategy once at startup:
  "duckduckgo" - scrape DuckDuckGo's HTML endpoint; fall back to stub on failure
  "stub"       - always return deterministic fake results

Neither strategy raises to the caller. The search_mode tag reports which
source produced the results.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional
from urllib.parse import parse_qs, quote, urlparse

import requests
from requests.exceptions import RequestException
from selectolax.parser import HTMLParser

from app.api.models.search import SearchMode, SearchResult
from app.core.config import settings

logger = logging.getLogger(__name__)

DUCKDUCKGO_HTML_URL = "https://html.duckduckgo.com/html/"
BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html",
    "Accept-Language": "en-US,en;q=0.9",
}


@dataclass
class SearchOutcome:
    results: List[SearchResult]
    search_mode: SearchMode


class SearchExecutor(ABC):
    """Executes one metered search."""

    @abstractmethod
    def execute(self, query: str) -> SearchOutcome:
        ...


def stub_results(query: str) -> List[SearchResult]:
    """Deterministic results derived from the query alone."""
    encoded = quote(query, safe="")
    return [
        SearchResult(
            title=f"{query} - Wikipedia",
            url=f"https://en.wikipedia.org/wiki/{encoded}",
            snippet=f"Comprehensive overview of {query} from the free encyclopedia.",
        ),
        SearchResult(
            title=f"{query} - Latest News",
            url="https://news.ycombinator.com/item?id=00000",
            snippet=f"Discussion and latest developments about {query} on Hacker News.",
        ),
        SearchResult(
            title=f"Understanding {query} - A Beginner's Guide",
            url=f"https://example.com/guide/{encoded}",
            snippet=f"Learn everything you need to know about {query} in this guide.",
        ),
        SearchResult(
            title=f"{query} | Research Papers",
            url=f"https://scholar.google.com/scholar?q={encoded}",
            snippet=f"Academic papers and citations related to {query}.",
        ),
        SearchResult(
            title=f"{query} - Reddit Discussion",
            url=f"https://www.reddit.com/search/?q={encoded}",
            snippet=f"Community discussion and opinions about {query}.",
        ),
    ]


class StubSearchExecutor(SearchExecutor):
    """Offline strategy. Never touches the network."""

    def __init__(self, search_mode: SearchMode = "stub", max_results: Optional[int] = None):
        self.search_mode = search_mode
        self.max_results = max_results if max_results is not None else settings.SEARCH_MAX_RESULTS

    def execute(self, query: str) -> SearchOutcome:
        results = stub_results(query)[:self.max_results]
        return SearchOutcome(results=results, search_mode=self.search_mode)


def _clean_text(text: Optional[str]) -> str:
    """Collapse whitespace in extracted node text."""
    if not text:
        return ""
    return " ".join(text.split())


def extract_result_url(raw: str) -> str:
    """
    Resolve the target URL of a DuckDuckGo result link.

    DuckDuckGo wraps results in ``//duckduckgo.com/l/?uddg=<encoded target>``
    redirects; protocol-relative links are promoted to https.
    """
    uddg = parse_qs(urlparse(raw).query).get("uddg")
    if uddg:
        return uddg[0]
    if raw.startswith("//"):
        return "https:" + raw
    return raw


def parse_duckduckgo_html(html: str, max_results: int) -> List[SearchResult]:
    """
    Extract up to ``max_results`` web results from a DuckDuckGo HTML page.

    Ads and links that stay on duckduckgo.com are skipped.
    """
    parser = HTMLParser(html)
    results: List[SearchResult] = []

    for block in parser.css(".result.results_links"):
        if len(results) >= max_results:
            break

        classes = (block.attributes.get("class") or "").split()
        if "result--ad" in classes:
            continue

        link = block.css_first("a.result__a")
        if link is None:
            continue

        href = link.attributes.get("href") or ""
        title = _clean_text(link.text())
        snippet_node = block.css_first(".result__snippet")
        snippet = _clean_text(snippet_node.text()) if snippet_node else ""

        result_url = extract_result_url(href)
        if title and result_url and "duckduckgo.com" not in result_url:
            results.append(SearchResult(title=title, url=result_url, snippet=snippet))

    return results


class DuckDuckGoSearchExecutor(SearchExecutor):
    """
    Live strategy: scrape DuckDuckGo's HTML endpoint.

    Any failure, including a page with no parseable results, is absorbed and
    answered with stub results tagged "fallback_stub".
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        max_results: Optional[int] = None,
        fallback: Optional[SearchExecutor] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.SEARCH_TIMEOUT
        self.max_results = max_results if max_results is not None else settings.SEARCH_MAX_RESULTS
        self.fallback = fallback or StubSearchExecutor(
            search_mode="fallback_stub", max_results=self.max_results
        )

    def fetch_results(self, query: str) -> List[SearchResult]:
        """
        Fetch and parse live results.

        Raises:
            RequestException: If the HTTP request fails or returns an error status
        """
        response = requests.get(
            DUCKDUCKGO_HTML_URL,
            params={"q": query},
            headers=BROWSER_HEADERS,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return parse_duckduckgo_html(response.text, self.max_results)

    def execute(self, query: str) -> SearchOutcome:
        try:
            results = self.fetch_results(query)
        except RequestException as e:
            logger.error(f"DuckDuckGo search failed, falling back to stub: {e}")
            return self.fallback.execute(query)
        except Exception as e:
            logger.error(f"Unexpected error parsing DuckDuckGo results, falling back to stub: {e}")
            return self.fallback.execute(query)

        if not results:
            logger.warning(f"DuckDuckGo returned no parseable results for '{query}', falling back to stub")
            return self.fallback.execute(query)

        return SearchOutcome(results=results, search_mode="duckduckgo")


def create_search_executor(provider: str) -> SearchExecutor:
    """Map a SEARCH_PROVIDER value to a strategy. Unknown values get the live one."""
    if provider.strip().lower() == "stub":
        return StubSearchExecutor()
    return DuckDuckGoSearchExecutor()


@lru_cache()
def get_search_executor() -> SearchExecutor:
    executor = create_search_executor(settings.SEARCH_PROVIDER)
    logger.info(f"Search provider: {type(executor).__name__}")
    return executor
