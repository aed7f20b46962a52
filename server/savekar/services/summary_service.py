# server/savekar/services/summary_service.py

import json
import logging
import re
from typing import Optional, Dict

import requests
from flask import current_app

from savekar.models.website import WebsiteType

logger = logging.getLogger(__name__)

JSON_OBJECT = re.compile(r'\{[\s\S]*\}')

RESPONSE_FORMAT = """
Format your response as JSON:
{
  "title": "Your title here",
  "description": "Your description here"
}"""

PROMPTS = {
    WebsiteType.YOUTUBE: (
        "Analyze this YouTube video URL: {url}\n\n"
        "Please provide:\n"
        "1. A concise, engaging title (max 80 characters)\n"
        "2. A detailed description (2-3 sentences) explaining what the video is about, "
        "key topics covered, and why someone might want to watch it."
    ),
    WebsiteType.TWITTER: (
        "Analyze this Twitter/X post URL: {url}\n\n"
        "Please provide:\n"
        "1. A descriptive title that captures the essence of the tweet (max 80 characters)\n"
        "2. A summary description (2-3 sentences) explaining the main point, context, "
        "or significance of the tweet."
    ),
    WebsiteType.INSTAGRAM: (
        "Analyze this Instagram post URL: {url}\n\n"
        "Please provide:\n"
        "1. A descriptive title for the Instagram post (max 80 characters)\n"
        "2. A description (2-3 sentences) explaining what the post shows, its theme, or message."
    ),
}

WEBSITE_PROMPT = (
    "Analyze this website URL: {url}\n\n"
    "Please provide:\n"
    "1. A clear, descriptive title for this webpage (max 80 characters)\n"
    "2. A comprehensive description (2-3 sentences) explaining what the website/page is about, "
    "its main content, and value to readers."
)

FAILED_SUMMARY = {
    "title": "Content Summary",
    "description": "Unable to generate summary at this time",
}


class SummaryService:
    """Generates a title/description for a URL with the Gemini REST API."""

    REQUEST_TIMEOUT = 20

    @staticmethod
    def is_enabled() -> bool:
        return bool(current_app.config.get("GEMINI_API_KEY"))

    @staticmethod
    def build_prompt(url: str, website_type: WebsiteType) -> str:
        template = PROMPTS.get(website_type, WEBSITE_PROMPT)
        return template.format(url=url) + "\n" + RESPONSE_FORMAT

    @staticmethod
    def generate_summary(url: str, website_type: WebsiteType) -> Optional[Dict[str, str]]:
        if not SummaryService.is_enabled():
            return None

        config = current_app.config
        endpoint = f"{config['GEMINI_API_URL'].rstrip('/')}/models/{config['GEMINI_MODEL']}:generateContent"

        try:
            response = requests.post(
                endpoint,
                params={"key": config["GEMINI_API_KEY"]},
                json={"contents": [{"parts": [{"text": SummaryService.build_prompt(url, website_type)}]}]},
                timeout=SummaryService.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            text = SummaryService._extract_text(response.json())
        except requests.exceptions.RequestException as e:
            logger.warning(f"Gemini request failed for {url}: {e}")
            return dict(FAILED_SUMMARY)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected Gemini response for {url}: {e}")
            return dict(FAILED_SUMMARY)

        return SummaryService.parse_summary(text)

    @staticmethod
    def _extract_text(payload: dict) -> str:
        parts = payload["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)

    @staticmethod
    def parse_summary(text: str) -> Dict[str, str]:
        """Read a title/description pair out of a model reply.

        The first JSON object wins; otherwise the first line is the title and
        the rest is the description.
        """
        match = JSON_OBJECT.search(text or "")
        if match:
            try:
                parsed = json.loads(match.group(0))
                return {
                    "title": parsed.get("title") or "Untitled Content",
                    "description": parsed.get("description") or "No description available",
                }
            except (ValueError, AttributeError) as e:
                logger.debug(f"Failed to parse Gemini JSON response: {e}")

        lines = [line.strip() for line in (text or "").split("\n") if line.strip()]
        title = lines[0].strip("\"'") if lines else ""
        description = " ".join(lines[1:]).strip("\"'")

        return {
            "title": title or "AI Generated Title",
            "description": description or "AI generated description",
        }
