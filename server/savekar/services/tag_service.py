# server/savekar/services/tag_service.py

import logging
from typing import Optional, List, Iterable

from sqlalchemy.exc import IntegrityError

from savekar.errors import BadRequestError, ConflictError
from savekar.extensions import db
from savekar.models.tag import Tag
from savekar.utils.helpers import random_color, escape_like
from savekar.utils.validators import InputValidator

logger = logging.getLogger(__name__)


class TagService:

    LIST_LIMIT = 50

    @staticmethod
    def list_tags(user_id: str, search: Optional[str] = None) -> List[Tag]:
        query = Tag.query.filter_by(user_id=user_id)

        if search and search.strip():
            term = f"%{escape_like(search.strip().lower())}%"
            query = query.filter(Tag.name.ilike(term, escape="\\"))

        return (
            query.order_by(Tag.usage_count.desc(), Tag.name.asc())
            .limit(TagService.LIST_LIMIT)
            .all()
        )

    @staticmethod
    def create_or_increment(user_id: str, name: Optional[str], color: Optional[str] = None) -> Tag:
        is_valid, name, error = InputValidator.validate_tag_name(name)
        if not is_valid:
            raise BadRequestError(error)

        is_valid, color, error = InputValidator.validate_color(color)
        if not is_valid:
            raise BadRequestError(error)

        try:
            tag = TagService.record_usage(user_id, name, color=color or "#3b82f6")
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning(f"Concurrent tag write for '{name}' by user {user_id}")
            raise ConflictError("Tag was modified concurrently, please retry", "TAG_CONFLICT")

        logger.info(f"Tag '{tag.name}' now used {tag.usage_count} time(s) by user {user_id}")
        return tag

    @staticmethod
    def record_usage(user_id: str, name: str, color: Optional[str] = None) -> Tag:
        """Increment an existing tag or create it with usage_count 1.

        Runs inside the caller's transaction and does not commit. Pending tags
        are autoflushed by the lookup, so a repeated name within one
        transaction finds the row created a moment earlier. A concurrent
        insert of the same name fails on the unique constraint at flush time.
        """
        tag = Tag.query.filter_by(user_id=user_id, name=name).first()
        if tag:
            tag.increment_usage()
            return tag

        tag = Tag(user_id=user_id, name=name, color=color or random_color(), usage_count=1)
        db.session.add(tag)
        logger.debug(f"Tag '{name}' created for user {user_id}")
        return tag

    @staticmethod
    def process_tags(user_id: str, raw_tags: Optional[Iterable]) -> List[str]:
        """Normalise a website's tag list and bump usage for every entry.

        Each raw entry counts on its own: ["AI", " ai "] stores ["ai", "ai"]
        and leaves the "ai" tag with two more uses. Blank entries are dropped.
        """
        processed = []
        if not raw_tags:
            return processed

        if isinstance(raw_tags, str):
            raw_tags = [raw_tags]

        for raw in raw_tags:
            name = InputValidator.normalize_tag_name(raw)
            if not name:
                continue
            TagService.record_usage(user_id, name)
            processed.append(name)

        return processed
