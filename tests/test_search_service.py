# tests/test_search_service.py
"""
Unit tests for search execution strategies.
"""
import pytest
from unittest.mock import patch, MagicMock

import requests
from requests.exceptions import ConnectionError, HTTPError, Timeout

from app.core.config import settings
from app.services.search import (
    DuckDuckGoSearchExecutor,
    SearchExecutor,
    StubSearchExecutor,
    create_search_executor,
    extract_result_url,
    parse_duckduckgo_html,
    stub_results,
    DUCKDUCKGO_HTML_URL,
)


DDG_HTML = """
<html><body>
<div class="result results_links results_links_deep result--ad">
  <h2 class="result__title">
    <a class="result__a" href="https://duckduckgo.com/y.js?ad_domain=ads.example">Sponsored</a>
  </h2>
  <a class="result__snippet" href="#">Buy now</a>
</div>
<div class="result results_links results_links_deep web-result">
  <h2 class="result__title">
    <a rel="nofollow" class="result__a"
       href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fbitcoin.org%2Fen%2F&amp;rut=abc">Bitcoin - Open source
       P2P money</a>
  </h2>
  <a class="result__snippet" href="#"><b>Bitcoin</b> is an innovative payment network &amp; a new kind of money.</a>
</div>
<div class="result results_links results_links_deep web-result">
  <h2 class="result__title">
    <a rel="nofollow" class="result__a" href="//en.wikipedia.org/wiki/Bitcoin">Bitcoin - Wikipedia</a>
  </h2>
</div>
<div class="result results_links results_links_deep web-result">
  <h2 class="result__title">
    <a rel="nofollow" class="result__a" href="https://duckduckgo.com/settings">Settings</a>
  </h2>
</div>
<div class="result results_links results_links_deep web-result">
  <span class="result__snippet">No link in this block</span>
</div>
</body></html>
"""


def make_html_response(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = HTTPError(f"{status_code} Error")
    return response


class TestStubResults:
    """Test deterministic stub results."""

    def test_five_results(self):
        assert len(stub_results("bitcoin")) == 5

    def test_deterministic(self):
        assert stub_results("bitcoin") == stub_results("bitcoin")

    def test_depends_on_query(self):
        results = stub_results("bitcoin")
        assert results[0].title == "bitcoin - Wikipedia"
        assert results[0].url == "https://en.wikipedia.org/wiki/bitcoin"
        assert stub_results("ethereum") != results

    def test_query_is_url_encoded(self):
        results = stub_results("a b/c&d")
        assert results[0].url == "https://en.wikipedia.org/wiki/a%20b%2Fc%26d"
        assert results[3].url == "https://scholar.google.com/scholar?q=a%20b%2Fc%26d"

    def test_stub_executor(self):
        response = StubSearchExecutor().execute("bitcoin")
        assert response.search_mode == "stub"
        assert response.results == stub_results("bitcoin")

    def test_stub_executor_respects_max_results(self):
        response = StubSearchExecutor(max_results=2).execute("bitcoin")
        assert response.results == stub_results("bitcoin")[:2]

    def test_stub_executor_uses_configured_limit(self):
        with patch.object(settings, "SEARCH_MAX_RESULTS", 3):
            executor = StubSearchExecutor()

        assert len(executor.execute("bitcoin").results) == 3


class TestExtractResultUrl:
    """Test DuckDuckGo link unwrapping."""

    def test_uddg_redirect(self):
        raw = "//duckduckgo.com/l/?uddg=https%3A%2F%2Fexample.com%2Fpage%3Fa%3D1&rut=abc"
        assert extract_result_url(raw) == "https://example.com/page?a=1"

    def test_protocol_relative(self):
        assert extract_result_url("//example.com/x") == "https://example.com/x"

    def test_plain_url(self):
        assert extract_result_url("https://example.com") == "https://example.com"


class TestParseDuckDuckGoHtml:
    """Test result extraction from DuckDuckGo HTML."""

    def test_parses_results(self):
        results = parse_duckduckgo_html(DDG_HTML, max_results=5)

        assert [r.url for r in results] == [
            "https://bitcoin.org/en/",
            "https://en.wikipedia.org/wiki/Bitcoin",
        ]
        assert results[0].title == "Bitcoin - Open source P2P money"
        assert results[0].snippet == "Bitcoin is an innovative payment network & a new kind of money."
        assert results[1].snippet == ""

    def test_respects_max_results(self):
        results = parse_duckduckgo_html(DDG_HTML, max_results=1)
        assert len(results) == 1

    def test_empty_page(self):
        assert parse_duckduckgo_html("<html><body></body></html>", max_results=5) == []


class TestDuckDuckGoSearchExecutor:
    """Test the live strategy and its fallback."""

    @patch("app.services.search.requests.get")
    def test_live_results(self, mock_get):
        mock_get.return_value = make_html_response(DDG_HTML)

        response = DuckDuckGoSearchExecutor(timeout=8, max_results=5).execute("bitcoin")

        assert response.search_mode == "duckduckgo"
        assert len(response.results) == 2
        args, kwargs = mock_get.call_args
        assert args[0] == DUCKDUCKGO_HTML_URL
        assert kwargs["params"] == {"q": "bitcoin"}
        assert kwargs["timeout"] == 8
        assert "Mozilla" in kwargs["headers"]["User-Agent"]

    @pytest.mark.parametrize("error", [
        ConnectionError("network down"),
        Timeout("timed out"),
    ])
    @patch("app.services.search.requests.get")
    def test_network_failure_falls_back(self, mock_get, error):
        mock_get.side_effect = error

        response = DuckDuckGoSearchExecutor().execute("bitcoin")

        assert response.search_mode == "fallback_stub"
        assert response.results == stub_results("bitcoin")

    @patch("app.services.search.requests.get")
    def test_http_error_falls_back(self, mock_get):
        mock_get.return_value = make_html_response("blocked", status_code=403)

        response = DuckDuckGoSearchExecutor().execute("bitcoin")

        assert response.search_mode == "fallback_stub"

    @patch("app.services.search.requests.get")
    def test_no_parsed_results_falls_back(self, mock_get):
        mock_get.return_value = make_html_response("<html><body>captcha</body></html>")

        response = DuckDuckGoSearchExecutor().execute("bitcoin")

        assert response.search_mode == "fallback_stub"
        assert response.results == stub_results("bitcoin")

    @patch("app.services.search.parse_duckduckgo_html")
    @patch("app.services.search.requests.get")
    def test_parser_error_falls_back(self, mock_get, mock_parse):
        mock_get.return_value = make_html_response(DDG_HTML)
        mock_parse.side_effect = RuntimeError("parser exploded")

        response = DuckDuckGoSearchExecutor().execute("bitcoin")

        assert response.search_mode == "fallback_stub"

    def test_uses_configured_defaults(self):
        with patch.object(settings, "SEARCH_TIMEOUT", 3.0), patch.object(settings, "SEARCH_MAX_RESULTS", 2):
            executor = DuckDuckGoSearchExecutor()

        assert executor.timeout == 3.0
        assert executor.max_results == 2
        assert executor.fallback.max_results == 2

    @patch("app.services.search.requests.get")
    def test_fallback_respects_max_results(self, mock_get):
        mock_get.side_effect = ConnectionError("network down")

        response = DuckDuckGoSearchExecutor(max_results=2).execute("bitcoin")

        assert response.search_mode == "fallback_stub"
        assert len(response.results) == 2


class TestSearchExecutor:
    """Test the strategy base class."""

    def test_base_class_is_abstract(self):
        with pytest.raises(TypeError):
            SearchExecutor()

    def test_subclass_without_execute_fails_on_creation(self):
        class Incomplete(SearchExecutor):
            pass

        with pytest.raises(TypeError):
            Incomplete()


class TestCreateSearchExecutor:
    """Test strategy selection."""

    @pytest.mark.parametrize("provider", ["stub", "STUB", " Stub "])
    def test_stub(self, provider):
        assert isinstance(create_search_executor(provider), StubSearchExecutor)

    @pytest.mark.parametrize("provider", ["duckduckgo", "DuckDuckGo", "unknown"])
    def test_live(self, provider):
        assert isinstance(create_search_executor(provider), DuckDuckGoSearchExecutor)
