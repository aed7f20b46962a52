# server/savekar/services/metadata_service.py

import hashlib
import logging
from typing import Optional, Dict, Tuple
from urllib.parse import urlparse, urljoin

import requests
from bs4 import BeautifulSoup
from flask import current_app

from savekar.models.website import WebsiteType
from savekar.services.redis_service import RedisService
from savekar.services.summary_service import SummaryService
from savekar.utils.helpers import clean_dict
from savekar.utils.validators import URLValidator
from savekar.utils.url_detector import (
    analyze_url,
    thumbnail_for,
    default_title,
    default_description,
)

logger = logging.getLogger(__name__)


class MetadataService:

    MAX_CONTENT_LENGTH = 1024 * 1024
    USER_AGENT = "SaveKar Metadata Fetcher/1.0"
    MAX_REDIRECTS = 5

    @staticmethod
    def enrich(url: str, user_title: Optional[str] = None, user_description: Optional[str] = None) -> dict:
        """Classify a URL and resolve its title, description and thumbnail.

        User-supplied values always win. When both are supplied nothing is
        fetched. Otherwise websites go through Microlink (then plain HTML
        scraping), anything still missing is asked of the AI summariser, and
        type-specific defaults fill the rest. Never raises for collaborator
        failures.
        """
        website_type, embed_id = analyze_url(url)
        api_url = current_app.config.get("MICROLINK_API_URL", "https://api.microlink.io")

        result = {
            "type": website_type,
            "embed_id": embed_id,
            "thumbnail": thumbnail_for(url, website_type, embed_id, api_url),
            "image": None,
            "author": None,
            "publisher": None,
        }

        if user_title and user_description:
            result.update(title=user_title, description=user_description)
            return result

        title, description = user_title, user_description

        try:
            if website_type == WebsiteType.WEBSITE:
                page = MetadataService.fetch_website_metadata(url)
                title = title or page.get("title")
                description = description or page.get("description")
                result["image"] = page.get("image")
                result["author"] = page.get("author")
                result["publisher"] = page.get("publisher")

            if not title or not description:
                summary = SummaryService.generate_summary(url, website_type)
                if summary:
                    title = title or summary.get("title")
                    description = description or summary.get("description")

        except Exception as e:
            logger.error(f"Metadata enrichment failed for {url}: {e}", exc_info=True)

        result["title"] = title or default_title(website_type)
        result["description"] = description or default_description(website_type)
        return result

    @staticmethod
    def fetch_website_metadata(url: str) -> Dict[str, Optional[str]]:
        metadata = MetadataService.fetch_microlink(url)
        if metadata.get("title") and metadata.get("description"):
            return metadata

        scraped = MetadataService.fetch_html_metadata(url)
        for key, value in scraped.items():
            if value and not metadata.get(key):
                metadata[key] = value
        return metadata

    @staticmethod
    def fetch_microlink(url: str) -> Dict[str, Optional[str]]:
        url_hash = hashlib.md5(url.encode()).hexdigest()

        cached = RedisService().get_cached_metadata(url_hash)
        if cached:
            return cached

        metadata = {
            "title": None,
            "description": None,
            "image": None,
            "author": None,
            "publisher": None,
        }

        api_url = current_app.config.get("MICROLINK_API_URL", "https://api.microlink.io")
        timeout = current_app.config.get("METADATA_TIMEOUT", 10)

        try:
            response = requests.get(
                api_url,
                params={"url": url},
                headers={"Accept": "application/json"},
                timeout=timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.Timeout:
            logger.warning(f"Microlink timeout for {url}")
            return metadata
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Microlink request failed for {url}: {e}")
            return metadata

        if not isinstance(payload, dict) or payload.get("status") != "success":
            logger.info(f"Microlink returned no data for {url}")
            return metadata

        data = payload.get("data") or {}
        image = data.get("image") or {}

        metadata.update(
            title=data.get("title") or None,
            description=data.get("description") or None,
            image=image.get("url") if isinstance(image, dict) else None,
            author=data.get("author") or None,
            publisher=data.get("publisher") or None,
        )

        RedisService().cache_metadata(url_hash, metadata)
        return metadata

    @staticmethod
    def fetch_html_metadata(url: str) -> Dict[str, Optional[str]]:
        metadata = {"title": None, "description": None, "image": None}
        timeout = current_app.config.get("METADATA_TIMEOUT", 10)

        try:
            response, final_url = MetadataService._open_public_page(url, timeout)
            if response is None:
                return metadata

            content_type = response.headers.get("Content-Type", "")
            if "text/html" not in content_type.lower():
                response.close()
                return metadata

            content = b""
            for chunk in response.iter_content(chunk_size=8192):
                content += chunk
                if len(content) > MetadataService.MAX_CONTENT_LENGTH:
                    break

            response.close()
        except requests.exceptions.RequestException as e:
            logger.warning(f"Page fetch failed for {url}: {e}")
            return metadata

        return MetadataService.parse_html(content, final_url)

    @staticmethod
    def _open_public_page(url: str, timeout) -> Tuple[Optional[requests.Response], str]:
        # every hop is checked, a public page may redirect inward
        for _ in range(MetadataService.MAX_REDIRECTS + 1):
            if not URLValidator.is_public_url(url):
                logger.warning(f"Skipping page fetch for non-public address {url}")
                return None, url

            response = requests.get(
                url,
                timeout=timeout,
                headers={
                    "User-Agent": MetadataService.USER_AGENT,
                    "Accept": "text/html,application/xhtml+xml,*/*"
                },
                allow_redirects=False,
                stream=True
            )

            if not response.is_redirect:
                return response, url

            location = response.headers.get("Location")
            response.close()
            if not location:
                return None, url
            url = urljoin(url, location)

        logger.warning(f"Too many redirects fetching {url}")
        return None, url

    @staticmethod
    def parse_html(content, url: str) -> Dict[str, Optional[str]]:
        soup = BeautifulSoup(content, "html.parser")
        parsed_url = urlparse(url)
        base_url = f"{parsed_url.scheme}://{parsed_url.netloc}"

        def meta(**attrs) -> Optional[str]:
            tag = soup.find("meta", attrs=attrs)
            if tag and tag.get("content"):
                return tag["content"].strip()
            return None

        title = meta(property="og:title") or meta(name="twitter:title")
        if not title:
            title_tag = soup.find("title")
            title = title_tag.string.strip() if title_tag and title_tag.string else None

        description = (
            meta(property="og:description")
            or meta(name="twitter:description")
            or meta(name="description")
        )

        image = meta(property="og:image") or meta(name="twitter:image")

        return clean_dict({
            "title": title[:255] if title else None,
            "description": description[:1000] if description else None,
            "image": MetadataService._resolve_url(image, base_url) if image else None,
        })

    @staticmethod
    def _resolve_url(url: str, base_url: str) -> str:
        if url.startswith("//"):
            return f"https:{url}"
        elif not url.startswith(("http://", "https://")):
            return urljoin(base_url, url)
        return url

    @staticmethod
    def preview(url: str) -> dict:
        metadata = MetadataService.enrich(url)
        return {
            "title": metadata["title"],
            "description": metadata["description"],
            "thumbnail": metadata["thumbnail"],
            "type": metadata["type"].value,
            "image": metadata.get("image"),
            "author": metadata.get("author"),
            "publisher": metadata.get("publisher"),
        }
