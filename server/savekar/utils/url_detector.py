# server/savekar/utils/url_detector.py

import re
from typing import Optional, Tuple
from urllib.parse import urlparse, parse_qs, quote

from savekar.models.website import WebsiteType

PLACEHOLDER_THUMBNAIL = "/placeholder.svg?height=200&width=300"

YOUTUBE_DOMAINS = ("youtube.com", "youtu.be")
TWITTER_DOMAINS = ("twitter.com", "x.com")
INSTAGRAM_DOMAINS = ("instagram.com",)

TWEET_PATH = re.compile(r'/status/(\d+)')
INSTAGRAM_POST_PATH = re.compile(r'/p/([^/]+)')
YOUTUBE_EMBED_PATH = re.compile(r'^/(?:shorts|embed|live)/([^/?#]+)')

DEFAULT_TITLES = {
    WebsiteType.YOUTUBE: "YouTube Video",
    WebsiteType.TWITTER: "Twitter Post",
    WebsiteType.INSTAGRAM: "Instagram Post",
    WebsiteType.WEBSITE: "Website",
    WebsiteType.NOTE: "Note",
}

DEFAULT_DESCRIPTIONS = {
    WebsiteType.YOUTUBE: "Video content from YouTube",
    WebsiteType.TWITTER: "Post from Twitter/X",
    WebsiteType.INSTAGRAM: "Post from Instagram",
    WebsiteType.WEBSITE: "Web content",
    WebsiteType.NOTE: "Saved note",
}


def _host_matches(hostname: str, domains: Tuple[str, ...]) -> bool:
    return any(hostname == d or hostname.endswith(f".{d}") for d in domains)


def analyze_url(url: str) -> Tuple[WebsiteType, Optional[str]]:
    """Classify a URL and pull out the platform embed id, if any."""
    try:
        parsed = urlparse(url.strip())
        hostname = (parsed.hostname or "").lower()
    except (AttributeError, ValueError):
        return WebsiteType.WEBSITE, None

    if not hostname:
        return WebsiteType.WEBSITE, None

    path = parsed.path or ""

    if _host_matches(hostname, YOUTUBE_DOMAINS):
        video_id = ""
        if _host_matches(hostname, ("youtu.be",)):
            video_id = path.lstrip("/")
        else:
            video_id = (parse_qs(parsed.query).get("v") or [""])[0]
            if not video_id:
                match = YOUTUBE_EMBED_PATH.match(path)
                video_id = match.group(1) if match else ""
        return WebsiteType.YOUTUBE, video_id or None

    if _host_matches(hostname, TWITTER_DOMAINS):
        match = TWEET_PATH.search(path)
        return WebsiteType.TWITTER, match.group(1) if match else None

    if _host_matches(hostname, INSTAGRAM_DOMAINS):
        match = INSTAGRAM_POST_PATH.search(path)
        return WebsiteType.INSTAGRAM, match.group(1) if match else None

    return WebsiteType.WEBSITE, None


def microlink_screenshot_url(url: str, api_url: str = "https://api.microlink.io") -> str:
    return f"{api_url.rstrip('/')}/?url={quote(url, safe='')}&screenshot=true&meta=false&embed=screenshot.url"


def thumbnail_for(url: str, website_type: WebsiteType, embed_id: Optional[str],
                  api_url: str = "https://api.microlink.io") -> str:
    if website_type == WebsiteType.YOUTUBE and embed_id:
        return f"https://img.youtube.com/vi/{embed_id}/maxresdefault.jpg"
    if website_type == WebsiteType.WEBSITE:
        return microlink_screenshot_url(url, api_url)
    return PLACEHOLDER_THUMBNAIL


def default_title(website_type: WebsiteType) -> str:
    return DEFAULT_TITLES.get(website_type, "Website")


def default_description(website_type: WebsiteType) -> str:
    return DEFAULT_DESCRIPTIONS.get(website_type, "Web content")
