# server/savekar/services/website_service.py

import logging
from datetime import datetime
from typing import Optional, List, Any

from sqlalchemy.exc import IntegrityError

from savekar.errors import BadRequestError, NotFoundError, ConflictError, DuplicateWebsiteError
from savekar.extensions import db
from savekar.models.website import Website, WebsiteType
from savekar.services.folder_service import get_user_folder
from savekar.services.metadata_service import MetadataService
from savekar.services.tag_service import TagService
from savekar.utils.helpers import parse_datetime, escape_like, truncate_string
from savekar.utils.validators import URLValidator, InputValidator

logger = logging.getLogger(__name__)

ALL_FOLDERS = "all"

UPDATABLE_FIELDS = {
    "url",
    "type",
    "embed_id",
    "title",
    "description",
    "thumbnail",
    "tags",
    "is_favorite",
    "view_count",
    "folder_id",
    "scheduled_for",
}


def get_user_website(website_id: str, user_id: str) -> Optional[Website]:
    return Website.query.filter_by(id=website_id, user_id=user_id).first()


class WebsiteService:

    @staticmethod
    def list_websites(
        user_id: str,
        website_type: Optional[str] = None,
        search: Optional[str] = None,
        favorites: bool = False,
        folder_id: Optional[str] = None,
    ) -> List[Website]:
        query = Website.query.filter_by(user_id=user_id)

        if folder_id is None:
            query = query.filter(Website.folder_id.is_(None))
        elif folder_id != ALL_FOLDERS:
            query = query.filter(Website.folder_id == folder_id)

        if website_type and website_type != "all":
            try:
                query = query.filter(Website.type == WebsiteType(website_type))
            except ValueError:
                raise BadRequestError(f"Unknown website type: {website_type}", "INVALID_TYPE")

        if favorites:
            query = query.filter(Website.is_favorite.is_(True))

        if search and search.strip():
            term = f"%{escape_like(search.strip())}%"
            query = query.filter(
                db.or_(
                    Website.title.ilike(term, escape="\\"),
                    Website.description.ilike(term, escape="\\"),
                    WebsiteService._any_tag_matches(term),
                )
            )

        return query.order_by(Website.created_at.desc(), Website.id.desc()).all()

    @staticmethod
    def _any_tag_matches(term: str):
        """EXISTS over the elements of the JSON tags array, one tag at a time."""
        if db.engine.dialect.name == "postgresql":
            elements = db.func.json_array_elements_text(Website.tags).table_valued("value")
        else:
            elements = db.func.json_each(Website.tags).table_valued("value")

        return (
            db.select(elements.c.value)
            .where(elements.c.value.ilike(term, escape="\\"))
            .exists()
        )

    @staticmethod
    def _clean_text(value: Any, field: str, max_length: int) -> Optional[str]:
        is_valid, value, error = InputValidator.validate_text(value, field, max_length=max_length)
        if not is_valid:
            raise BadRequestError(error, "INVALID_FIELD")
        return value or None

    @staticmethod
    def _resolve_folder_id(user_id: str, folder_id: Optional[str]) -> Optional[str]:
        if not folder_id or folder_id == "null":
            return None
        if not get_user_folder(folder_id, user_id):
            raise NotFoundError("Folder not found", "FOLDER_NOT_FOUND")
        return folder_id

    @staticmethod
    def _parse_schedule(value: Any) -> Optional[datetime]:
        try:
            return parse_datetime(value)
        except (ValueError, TypeError):
            raise BadRequestError("Invalid scheduled_for timestamp", "INVALID_SCHEDULE")

    @staticmethod
    def create_website(
        user_id: str,
        url: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        scheduled_for: Any = None,
        folder_id: Optional[str] = None,
    ) -> Website:
        is_valid, url, error = URLValidator.validate(url)
        if not is_valid:
            raise BadRequestError(error, "INVALID_URL")

        existing = Website.query.filter_by(user_id=user_id, url=url).first()
        if existing:
            raise DuplicateWebsiteError(existing)

        title = WebsiteService._clean_text(title, "Title", 255)
        description = WebsiteService._clean_text(description, "Description", 5000)
        return WebsiteService._save_new(user_id, url, title, description, tags, scheduled_for, folder_id)

    @staticmethod
    def replace_website(
        user_id: str,
        url: Optional[str],
        replace_id: Optional[str],
        title: Optional[str] = None,
        description: Optional[str] = None,
        tags: Optional[List[str]] = None,
        scheduled_for: Any = None,
        folder_id: Optional[str] = None,
    ) -> Website:
        is_valid, url, error = URLValidator.validate(url)
        if not is_valid or not replace_id:
            raise BadRequestError("URL and replace_id are required")

        title = WebsiteService._clean_text(title, "Title", 255)
        description = WebsiteService._clean_text(description, "Description", 5000)

        # gone already is fine
        removed = Website.query.filter_by(id=replace_id, user_id=user_id).delete(synchronize_session="fetch")
        if removed:
            db.session.flush()
            logger.info(f"Website {replace_id} removed for replacement by user {user_id}")

        return WebsiteService._save_new(user_id, url, title, description, tags, scheduled_for, folder_id)

    @staticmethod
    def _save_new(user_id, url, title, description, tags, scheduled_for, folder_id) -> Website:
        scheduled_at = WebsiteService._parse_schedule(scheduled_for)
        folder_id = WebsiteService._resolve_folder_id(user_id, folder_id)

        metadata = MetadataService.enrich(url, title, description)

        try:
            processed_tags = TagService.process_tags(user_id, tags)

            website = Website(
                user_id=user_id,
                url=url,
                type=metadata["type"],
                embed_id=metadata.get("embed_id"),
                title=truncate_string(metadata["title"], 255),
                description=metadata["description"],
                thumbnail=metadata["thumbnail"],
                tags=processed_tags,
                folder_id=folder_id,
                scheduled_for=scheduled_at,
            )

            db.session.add(website)
            db.session.commit()

        except IntegrityError:
            db.session.rollback()
            existing = Website.query.filter_by(user_id=user_id, url=url).first()
            if existing:
                raise DuplicateWebsiteError(existing)
            raise ConflictError("Website could not be saved due to a concurrent change, please retry")

        logger.info(f"Website created: {website.id} ({website.type.value}) by user {user_id}")
        return website

    @staticmethod
    def get_website(user_id: str, website_id: str) -> Website:
        website = get_user_website(website_id, user_id)
        if not website:
            raise NotFoundError("Website not found")
        return website

    @staticmethod
    def update_website(user_id: str, website_id: str, updates: dict) -> Website:
        website = WebsiteService.get_website(user_id, website_id)
        changes = []

        for field, value in updates.items():
            if field not in UPDATABLE_FIELDS:
                continue

            if field == "url":
                is_valid, value, error = URLValidator.validate(value)
                if not is_valid:
                    raise BadRequestError(error, "INVALID_URL")
            elif field == "type":
                try:
                    value = WebsiteType(value)
                except ValueError:
                    raise BadRequestError(f"Unknown website type: {value}", "INVALID_TYPE")
            elif field == "tags":
                if not isinstance(value, list):
                    raise BadRequestError("Tags must be a list")
                value = [t for t in (InputValidator.normalize_tag_name(v) for v in value) if t]
            elif field == "is_favorite":
                value = bool(value)
            elif field == "view_count":
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    raise BadRequestError("view_count must be a non-negative integer")
            elif field == "folder_id":
                value = WebsiteService._resolve_folder_id(user_id, value)
            elif field == "scheduled_for":
                value = WebsiteService._parse_schedule(value)
            elif field == "title":
                value = WebsiteService._clean_text(value, "Title", 255)
                if not value:
                    raise BadRequestError("Title cannot be empty")
            elif field in ("description", "thumbnail"):
                if value is not None and not isinstance(value, str):
                    raise BadRequestError(f"{field} must be a string", "INVALID_FIELD")
                value = value or ""

            setattr(website, field, value)
            changes.append(field)

        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Another website already uses this URL", "URL_EXISTS")

        if changes:
            logger.info(f"Website updated: {website.id} ({', '.join(changes)}) by user {user_id}")
        return website

    @staticmethod
    def record_view(user_id: str, website_id: str) -> Website:
        website = WebsiteService.get_website(user_id, website_id)
        website.record_view()
        db.session.commit()
        return website

    @staticmethod
    def delete_website(user_id: str, website_id: str) -> None:
        website = WebsiteService.get_website(user_id, website_id)
        db.session.delete(website)
        db.session.commit()
        logger.info(f"Website deleted: {website_id} by user {user_id}")

    @staticmethod
    def preview(url: Optional[str]) -> dict:
        is_valid, url, error = URLValidator.validate(url)
        if not is_valid:
            raise BadRequestError(error, "INVALID_URL")
        return MetadataService.preview(url)
