# server/savekar/utils/__init__.py

from savekar.utils.validators import URLValidator, InputValidator
from savekar.utils.responses import ApiResponse
from savekar.utils.url_detector import (
    analyze_url,
    thumbnail_for,
    default_title,
    default_description,
)
from savekar.utils.helpers import (
    random_color,
    truncate_string,
    parse_datetime,
    escape_like,
    parse_bool,
    clean_dict,
    mask_email,
)

__all__ = [
    "URLValidator",
    "InputValidator",
    "ApiResponse",
    "analyze_url",
    "thumbnail_for",
    "default_title",
    "default_description",
    "random_color",
    "truncate_string",
    "parse_datetime",
    "escape_like",
    "parse_bool",
    "clean_dict",
    "mask_email",
]
