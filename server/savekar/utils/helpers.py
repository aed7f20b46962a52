# server/savekar/utils/helpers.py

import random
from datetime import datetime, timezone
from typing import Optional, Any, Dict

COLOR_PALETTE = [
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#10b981",  # green
    "#f59e0b",  # yellow
    "#8b5cf6",  # purple
    "#06b6d4",  # cyan
    "#f97316",  # orange
    "#84cc16",  # lime
    "#ec4899",  # pink
    "#6366f1",  # indigo
]


def random_color() -> str:
    return random.choice(COLOR_PALETTE)


def truncate_string(value: str, max_length: int = 100, suffix: str = "...") -> str:
    if not value or len(value) <= max_length:
        return value or ""

    return value[:max_length - len(suffix)] + suffix


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into a naive UTC datetime.

    Accepts a trailing ``Z``. Returns None for empty input and raises
    ValueError for anything unparseable.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)

    return parsed


def escape_like(value: str, escape_char: str = "\\") -> str:
    return (
        value.replace(escape_char, escape_char * 2)
        .replace("%", f"{escape_char}%")
        .replace("_", f"{escape_char}_")
    )


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def clean_dict(d: Dict, remove_none: bool = True) -> Dict:
    return {k: v for k, v in d.items() if not (remove_none and v is None)}


def mask_email(email: str) -> str:
    if not email or "@" not in email:
        return "***"

    local, domain = email.split("@", 1)

    if not local:
        masked_local = "*"
    elif len(local) <= 2:
        masked_local = local[0] + "*"
    else:
        masked_local = local[0] + "*" * (len(local) - 2) + local[-1]

    return f"{masked_local}@{domain}"
