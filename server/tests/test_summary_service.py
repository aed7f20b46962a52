"""Tests for SummaryService: Gemini reply parsing and request handling."""

from unittest.mock import MagicMock, patch

import requests
from flask import Flask

from savekar.models import WebsiteType
from savekar.services.summary_service import FAILED_SUMMARY, SummaryService


def _gemini_reply(text: str) -> MagicMock:
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return response


def test_parse_summary_reads_embedded_json() -> None:
    text = 'Sure! ```json\n{"title": "Pasta 101", "description": "How to cook pasta."}\n```'

    assert SummaryService.parse_summary(text) == {
        "title": "Pasta 101",
        "description": "How to cook pasta.",
    }


def test_parse_summary_fills_missing_json_fields() -> None:
    assert SummaryService.parse_summary('{"title": ""}') == {
        "title": "Untitled Content",
        "description": "No description available",
    }


def test_parse_summary_falls_back_to_lines() -> None:
    result = SummaryService.parse_summary('"A title"\nFirst line.\nSecond line.')

    assert result == {"title": "A title", "description": "First line. Second line."}


def test_parse_summary_of_nothing() -> None:
    assert SummaryService.parse_summary("") == {
        "title": "AI Generated Title",
        "description": "AI generated description",
    }


def test_disabled_without_api_key(app: Flask) -> None:
    with patch("savekar.services.summary_service.requests.post") as post:
        assert SummaryService.generate_summary("https://example.com", WebsiteType.WEBSITE) is None

    post.assert_not_called()


def test_generate_summary_calls_gemini(app: Flask) -> None:
    app.config["GEMINI_API_KEY"] = "key-123"
    reply = _gemini_reply('{"title": "T", "description": "D"}')

    with patch("savekar.services.summary_service.requests.post", return_value=reply) as post:
        result = SummaryService.generate_summary("https://youtu.be/abc", WebsiteType.YOUTUBE)

    assert result == {"title": "T", "description": "D"}
    args, kwargs = post.call_args
    assert args[0].endswith("/models/gemini-1.5-flash:generateContent")
    assert kwargs["params"] == {"key": "key-123"}
    prompt = kwargs["json"]["contents"][0]["parts"][0]["text"]
    assert "YouTube video URL: https://youtu.be/abc" in prompt


def test_generate_summary_failure_gives_placeholder(app: Flask) -> None:
    app.config["GEMINI_API_KEY"] = "key-123"

    with patch(
        "savekar.services.summary_service.requests.post",
        side_effect=requests.exceptions.ConnectionError("down"),
    ):
        result = SummaryService.generate_summary("https://example.com", WebsiteType.WEBSITE)

    assert result == FAILED_SUMMARY


def test_generate_summary_malformed_payload_gives_placeholder(app: Flask) -> None:
    app.config["GEMINI_API_KEY"] = "key-123"
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = {"candidates": []}

    with patch("savekar.services.summary_service.requests.post", return_value=response):
        result = SummaryService.generate_summary("https://example.com", WebsiteType.WEBSITE)

    assert result == FAILED_SUMMARY
