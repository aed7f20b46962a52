# server/savekar/utils/validators.py

import ipaddress
import re
import socket
from typing import Optional, Tuple
from urllib.parse import urlparse


class URLValidator:
    ALLOWED_SCHEMES = {"http", "https"}
    BLOCKED_SCHEMES = {"javascript", "data", "vbscript", "file", "ftp", "mailto"}
    MAX_URL_LENGTH = 2048

    BLOCKED_HOSTS = {
        "localhost", "127.0.0.1", "0.0.0.0", "::1",
        "metadata.google.internal",
    }
    BLOCKED_SUFFIXES = (".localhost", ".local", ".internal")

    @classmethod
    def validate(cls, url: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        if not url or not isinstance(url, str) or not url.strip():
            return False, None, "URL is required"

        url = url.strip()

        if len(url) > cls.MAX_URL_LENGTH:
            return False, None, f"URL is too long (max {cls.MAX_URL_LENGTH} characters)"

        try:
            parsed = urlparse(url)
            hostname = parsed.hostname
        except ValueError:
            return False, None, "Invalid URL format"

        scheme = parsed.scheme.lower()

        if scheme in cls.BLOCKED_SCHEMES:
            return False, None, "This URL type is not allowed"

        if scheme not in cls.ALLOWED_SCHEMES:
            return False, None, "URL must start with http:// or https://"

        if not parsed.netloc or not hostname:
            return False, None, "URL must include a domain"

        if cls._is_blocked_host(hostname):
            return False, None, "Local and private addresses are not allowed"

        return True, url, None

    @classmethod
    def _is_blocked_host(cls, hostname: str) -> bool:
        hostname = hostname.lower().rstrip(".")

        if hostname in cls.BLOCKED_HOSTS or hostname.endswith(cls.BLOCKED_SUFFIXES):
            return True

        return cls._is_private_ip(hostname)

    @classmethod
    def _is_private_ip(cls, host: str) -> bool:
        try:
            address = ipaddress.ip_address(host.split("%")[0])
        except ValueError:
            return False

        if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
            address = address.ipv4_mapped

        return (
            address.is_private
            or address.is_loopback
            or address.is_link_local
            or address.is_multicast
            or address.is_reserved
            or address.is_unspecified
        )

    @classmethod
    def is_public_url(cls, url: str) -> bool:
        """Whether a server-side fetch of ``url`` stays off internal networks.

        Runs the same host checks as ``validate`` and then resolves the name,
        rejecting it when any address it points at is private.
        """
        is_valid, _, _ = cls.validate(url)
        if not is_valid:
            return False

        hostname = urlparse(url.strip()).hostname
        try:
            infos = socket.getaddrinfo(hostname, None)
        except (socket.gaierror, UnicodeError):
            return False

        return all(not cls._is_private_ip(info[4][0]) for info in infos)


class InputValidator:
    HEX_COLOR_REGEX = re.compile(r'^#[0-9A-Fa-f]{6}$')
    CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

    MAX_FOLDER_NAME = 100
    MAX_TAG_NAME = 50

    @classmethod
    def validate_folder_name(cls, name: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        if not name or not isinstance(name, str):
            return False, None, "Folder name is required"

        name = name.strip()

        if not name:
            return False, None, "Folder name is required"

        if len(name) > cls.MAX_FOLDER_NAME:
            return False, None, f"Folder name is too long (max {cls.MAX_FOLDER_NAME} characters)"

        return True, name, None

    @classmethod
    def normalize_tag_name(cls, name) -> str:
        if not isinstance(name, str):
            return ""
        return name.strip().lower()

    @classmethod
    def validate_tag_name(cls, name: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        name = cls.normalize_tag_name(name)

        if not name:
            return False, None, "Tag name is required"

        if len(name) > cls.MAX_TAG_NAME:
            return False, None, f"Tag name is too long (max {cls.MAX_TAG_NAME} characters)"

        return True, name, None

    @classmethod
    def validate_color(cls, color: Optional[str]) -> Tuple[bool, Optional[str], Optional[str]]:
        if color is None or color == "":
            return True, None, None

        if not isinstance(color, str):
            return False, None, "Color must be a valid hex code (e.g., #3b82f6)"

        color = color.strip()

        if not color:
            return True, None, None

        if cls.HEX_COLOR_REGEX.match(color):
            return True, color.lower(), None

        return False, None, "Color must be a valid hex code (e.g., #3b82f6)"

    @classmethod
    def validate_text(cls, value, field: str, max_length: int = 255) -> Tuple[bool, Optional[str], Optional[str]]:
        """Optional free text: absent is fine, anything but a string is not."""
        if value is None:
            return True, "", None

        if not isinstance(value, str):
            return False, None, f"{field} must be a string"

        return True, cls.sanitize_string(value, max_length), None

    @classmethod
    def sanitize_string(cls, value: Optional[str], max_length: int = 255) -> str:
        if not value or not isinstance(value, str):
            return ""

        value = value.strip()

        if len(value) > max_length:
            value = value[:max_length]

        return cls.CONTROL_CHARS.sub('', value)
