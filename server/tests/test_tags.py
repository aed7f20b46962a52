"""Tests for tag usage tracking."""

from typing import Callable, Dict

import pytest
from flask import Flask
from flask.testing import FlaskClient

from savekar.errors import BadRequestError
from savekar.extensions import db
from savekar.models import Tag
from savekar.services.tag_service import TagService
from savekar.services.website_service import WebsiteService
from tests.conftest import OWNER, OTHER_OWNER


def _usage(name: str, owner: str = OWNER) -> int:
    return Tag.query.filter_by(user_id=owner, name=name).one().usage_count


def test_each_raw_entry_counts_separately(app: Flask) -> None:
    """["AI", " ai ", "Research"] bumps "ai" twice and "research" once."""
    website = WebsiteService.create_website(
        OWNER, "https://example.com", title="t", description="d", tags=["AI", " ai ", "Research"]
    )

    assert website.tags == ["ai", "ai", "research"]
    assert Tag.query.filter_by(user_id=OWNER).count() == 2
    assert _usage("ai") == 2
    assert _usage("research") == 1


def test_same_tag_on_two_websites_is_one_record(app: Flask) -> None:
    WebsiteService.create_website(OWNER, "https://example.com/1", title="t", description="d", tags=["research"])
    WebsiteService.create_website(OWNER, "https://example.com/2", title="t", description="d", tags=["Research"])

    assert Tag.query.filter_by(user_id=OWNER, name="research").count() == 1
    assert _usage("research") == 2


def test_tags_are_per_owner(app: Flask) -> None:
    WebsiteService.create_website(OWNER, "https://example.com", title="t", description="d", tags=["ai"])
    WebsiteService.create_website(OTHER_OWNER, "https://example.com", title="t", description="d", tags=["ai"])

    assert _usage("ai", OWNER) == 1
    assert _usage("ai", OTHER_OWNER) == 1


def test_process_tags_skips_blank_and_non_string_entries(app: Flask) -> None:
    processed = TagService.process_tags(OWNER, ["", "   ", None, 42, "Keep"])
    db.session.commit()

    assert processed == ["keep"]
    assert [t.name for t in Tag.query.filter_by(user_id=OWNER)] == ["keep"]


def test_process_tags_accepts_single_string(app: Flask) -> None:
    assert TagService.process_tags(OWNER, "Solo") == ["solo"]
    assert TagService.process_tags(OWNER, None) == []


def test_usage_is_not_decremented_on_delete(app: Flask) -> None:
    """Counts only grow; deleting a website leaves them as they were."""
    website = WebsiteService.create_website(OWNER, "https://example.com", title="t", description="d", tags=["ai"])

    WebsiteService.delete_website(OWNER, website.id)

    assert _usage("ai") == 1


def test_create_or_increment(app: Flask) -> None:
    created = TagService.create_or_increment(OWNER, "  Python ")

    assert created.name == "python"
    assert created.color == "#3b82f6"
    assert created.usage_count == 1

    again = TagService.create_or_increment(OWNER, "PYTHON", color="#10B981")

    assert again.id == created.id
    assert again.usage_count == 2


def test_create_or_increment_rejects_bad_input(app: Flask) -> None:
    with pytest.raises(BadRequestError):
        TagService.create_or_increment(OWNER, "  ")

    with pytest.raises(BadRequestError):
        TagService.create_or_increment(OWNER, "x" * 51)

    with pytest.raises(BadRequestError):
        TagService.create_or_increment(OWNER, "ok", color="red")


def test_list_orders_by_usage_then_name_and_caps(app: Flask) -> None:
    for i in range(55):
        db.session.add(Tag(user_id=OWNER, name=f"tag{i:02d}", usage_count=1))
    db.session.add(Tag(user_id=OWNER, name="popular", usage_count=9))
    db.session.add(Tag(user_id=OWNER, name="liked", usage_count=5))
    db.session.commit()

    tags = TagService.list_tags(OWNER)

    assert len(tags) == TagService.LIST_LIMIT
    assert [t.name for t in tags[:4]] == ["popular", "liked", "tag00", "tag01"]


def test_list_search_is_case_insensitive_substring(app: Flask) -> None:
    for name in ("machine-learning", "learning", "cooking", "100%_real"):
        db.session.add(Tag(user_id=OWNER, name=name))
    db.session.commit()

    assert sorted(t.name for t in TagService.list_tags(OWNER, search="LEARN")) == ["learning", "machine-learning"]
    assert [t.name for t in TagService.list_tags(OWNER, search="%_")] == ["100%_real"]


def test_http_tags(client: FlaskClient, auth_headers: Callable[..., Dict[str, str]]) -> None:
    headers = auth_headers()

    response = client.post("/tags", json={"name": "Reading"}, headers=headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["tag"]["usage_count"] == 1

    client.post("/tags", json={"name": "reading"}, headers=headers)
    client.post("/tags", json={"name": "writing"}, headers=headers)

    tags = client.get("/tags", headers=headers).get_json()["data"]["tags"]
    assert [(t["name"], t["usage_count"]) for t in tags] == [("reading", 2), ("writing", 1)]

    found = client.get("/tags?search=writ", headers=headers).get_json()["data"]["tags"]
    assert [t["name"] for t in found] == ["writing"]

    assert client.post("/tags", json={}, headers=headers).status_code == 400


def test_http_non_string_color_is_bad_request(
    client: FlaskClient, auth_headers: Callable[..., Dict[str, str]]
) -> None:
    """A colour sent as a list or number is rejected, not a server error."""
    headers = auth_headers()

    for color in (["#fff"], 5, {"hex": "#ffffff"}):
        response = client.post("/tags", json={"name": "reading", "color": color}, headers=headers)
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    assert Tag.query.count() == 0
