"""Tests for MetadataService: Microlink lookups, HTML scraping and enrichment."""

from typing import Optional
from unittest.mock import MagicMock, patch

import pytest
import requests
from flask import Flask

from savekar.models import WebsiteType
from savekar.services.metadata_service import MetadataService

PAGE = b"""
<html>
  <head>
    <title>  Plain title  </title>
    <meta property="og:title" content="Open Graph title">
    <meta name="description" content="Meta description">
    <meta property="og:image" content="/images/cover.png">
  </head>
  <body>hello</body>
</html>
"""


def _microlink_reply(payload: dict) -> MagicMock:
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


def test_parse_html_prefers_open_graph() -> None:
    metadata = MetadataService.parse_html(PAGE, "https://example.com/post/1")

    assert metadata == {
        "title": "Open Graph title",
        "description": "Meta description",
        "image": "https://example.com/images/cover.png",
    }


def test_parse_html_falls_back_to_title_tag() -> None:
    metadata = MetadataService.parse_html(b"<html><head><title>Only title</title></head></html>", "https://a.io")

    assert metadata == {"title": "Only title"}


def test_fetch_microlink_reads_success_payload(app: Flask) -> None:
    reply = _microlink_reply({
        "status": "success",
        "data": {
            "title": "Article",
            "description": "About things",
            "image": {"url": "https://cdn.example.com/a.png"},
            "publisher": "Example",
        },
    })

    with patch("savekar.services.metadata_service.requests.get", return_value=reply) as get:
        metadata = MetadataService.fetch_microlink("https://example.com/a")

    assert metadata["title"] == "Article"
    assert metadata["description"] == "About things"
    assert metadata["image"] == "https://cdn.example.com/a.png"
    assert metadata["publisher"] == "Example"
    assert metadata["author"] is None
    assert get.call_args.kwargs["params"] == {"url": "https://example.com/a"}


@pytest.mark.parametrize(
    "side_effect, payload",
    [
        (requests.exceptions.Timeout("slow"), None),
        (requests.exceptions.ConnectionError("down"), None),
        (None, {"status": "fail", "data": {}}),
    ],
)
def test_fetch_microlink_failures_return_empty_metadata(app: Flask, side_effect, payload) -> None:
    reply = _microlink_reply(payload)

    with patch(
        "savekar.services.metadata_service.requests.get", side_effect=side_effect, return_value=reply
    ):
        metadata = MetadataService.fetch_microlink("https://example.com/a")

    assert metadata["title"] is None
    assert metadata["description"] is None


def test_enrich_with_user_values_skips_network(app: Flask) -> None:
    with patch("savekar.services.metadata_service.requests.get") as get, patch(
        "savekar.services.summary_service.requests.post"
    ) as post:
        result = MetadataService.enrich("https://example.com/x", "Mine", "My notes")

    get.assert_not_called()
    post.assert_not_called()
    assert result["title"] == "Mine"
    assert result["description"] == "My notes"
    assert result["type"] == WebsiteType.WEBSITE


def test_enrich_fills_gaps_from_page_metadata(app: Flask, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        MetadataService,
        "fetch_website_metadata",
        staticmethod(lambda url: {"title": "Fetched", "description": "Fetched text", "publisher": "Pub"}),
    )

    result = MetadataService.enrich("https://example.com/x", user_title="Mine")

    assert result["title"] == "Mine"
    assert result["description"] == "Fetched text"
    assert result["publisher"] == "Pub"


def test_enrich_uses_summary_for_platform_links(app: Flask) -> None:
    app.config["GEMINI_API_KEY"] = "key-123"

    with patch(
        "savekar.services.metadata_service.SummaryService.generate_summary",
        return_value={"title": "Summarised", "description": "A video about code"},
    ) as summary:
        result = MetadataService.enrich("https://youtu.be/abc")

    summary.assert_called_once_with("https://youtu.be/abc", WebsiteType.YOUTUBE)
    assert result["title"] == "Summarised"
    assert result["embed_id"] == "abc"


def test_enrich_never_raises(app: Flask, monkeypatch: pytest.MonkeyPatch) -> None:
    """Unexpected collaborator failures fall back to type defaults."""

    def explode(url):
        raise RuntimeError("boom")

    monkeypatch.setattr(MetadataService, "fetch_website_metadata", staticmethod(explode))

    result = MetadataService.enrich("https://example.com/x")

    assert result["title"] == "Website"
    assert result["description"] == "Web content"


PUBLIC_ADDRESS = [(2, 1, 6, "", ("93.184.216.34", 0))]


def _page_reply(status: int = 200, location: Optional[str] = None) -> MagicMock:
    response = MagicMock()
    response.is_redirect = location is not None
    response.status_code = status
    response.headers = {"Content-Type": "text/html; charset=utf-8"}
    if location:
        response.headers["Location"] = location
    response.iter_content.return_value = [PAGE]
    return response


@pytest.mark.parametrize(
    "url",
    ["http://127.0.0.1:8080/admin", "http://10.1.2.3/", "http://localhost/", "http://169.254.169.254/"],
)
def test_fetch_html_metadata_skips_internal_hosts(app: Flask, url: str) -> None:
    with patch("savekar.services.metadata_service.requests.get") as get:
        metadata = MetadataService.fetch_html_metadata(url)

    get.assert_not_called()
    assert metadata == {"title": None, "description": None, "image": None}


def test_fetch_html_metadata_skips_names_resolving_inward(app: Flask) -> None:
    """A public-looking name that resolves to a private address is not fetched."""
    with patch(
        "savekar.utils.validators.socket.getaddrinfo", return_value=[(2, 1, 6, "", ("10.0.0.5", 0))]
    ), patch("savekar.services.metadata_service.requests.get") as get:
        MetadataService.fetch_html_metadata("https://intranet.example.com/")

    get.assert_not_called()


def test_fetch_html_metadata_does_not_follow_redirect_inward(app: Flask) -> None:
    redirect = _page_reply(302, location="http://127.0.0.1/secret")

    with patch("savekar.utils.validators.socket.getaddrinfo", return_value=PUBLIC_ADDRESS), patch(
        "savekar.services.metadata_service.requests.get", return_value=redirect
    ) as get:
        metadata = MetadataService.fetch_html_metadata("https://example.com/go")

    assert get.call_count == 1
    assert get.call_args.kwargs["allow_redirects"] is False
    assert metadata["title"] is None


def test_fetch_html_metadata_reads_public_page_after_redirect(app: Flask) -> None:
    replies = [_page_reply(301, location="/post/1"), _page_reply()]

    with patch("savekar.utils.validators.socket.getaddrinfo", return_value=PUBLIC_ADDRESS), patch(
        "savekar.services.metadata_service.requests.get", side_effect=replies
    ) as get:
        metadata = MetadataService.fetch_html_metadata("https://example.com/short")

    assert get.call_args.args[0] == "https://example.com/post/1"
    assert metadata["title"] == "Open Graph title"
    assert metadata["image"] == "https://example.com/images/cover.png"


def test_enrich_keeps_page_image_author_and_publisher(app: Flask, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        MetadataService,
        "fetch_website_metadata",
        staticmethod(lambda url: {"image": "https://cdn.example.com/i.png", "author": "Ann", "publisher": "Pub"}),
    )

    result = MetadataService.preview("https://example.com/x")

    assert result["image"] == "https://cdn.example.com/i.png"
    assert result["author"] == "Ann"
    assert result["publisher"] == "Pub"
    assert result["title"] == "Website"
