# server/biolink/utils/validators.py

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

from flask import current_app


class URLValidator:
    ALLOWED_SCHEMES = {"http", "https"}
    BLOCKED_SCHEMES = {"javascript", "data", "vbscript", "file"}
    MAX_URL_LENGTH = 2048

    BLOCKED_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}

    @classmethod
    def validate(cls, url: str) -> Tuple[bool, Optional[str], Optional[str]]:
        if not url:
            return False, None, "URL is required"

        url = url.strip()

        if len(url) > cls.MAX_URL_LENGTH:
            return False, None, f"URL is too long (max {cls.MAX_URL_LENGTH} characters)"

        try:
            parsed = urlparse(url)
        except ValueError:
            return False, None, "Invalid URL format"

        scheme = parsed.scheme.lower()

        if scheme in cls.BLOCKED_SCHEMES:
            return False, None, "This URL type is not allowed"

        if scheme not in cls.ALLOWED_SCHEMES:
            return False, None, "URL must start with http:// or https://"

        if not parsed.netloc:
            return False, None, "URL must include a domain"

        domain = parsed.netloc.split(":")[0].lower()

        if domain in cls.BLOCKED_HOSTS:
            return False, None, "Local addresses are not allowed"

        if cls._is_ip_address(domain) and cls._is_private_ip(domain):
            return False, None, "Private IP addresses are not allowed"

        return True, url, None

    @classmethod
    def _is_ip_address(cls, domain: str) -> bool:
        parts = domain.split(".")
        if len(parts) != 4:
            return False
        try:
            return all(0 <= int(p) <= 255 for p in parts)
        except ValueError:
            return False

    @classmethod
    def _is_private_ip(cls, ip: str) -> bool:
        parts = [int(p) for p in ip.split(".")]
        if parts[0] in (10, 127):
            return True
        if parts[0] == 172 and 16 <= parts[1] <= 31:
            return True
        if parts[0] == 192 and parts[1] == 168:
            return True
        return False


class InputValidator:

    @classmethod
    def validate_title(cls, title: str) -> Tuple[bool, Optional[str], Optional[str]]:
        max_len = current_app.config.get("TITLE_MAX_LENGTH", 255)
        title = cls.sanitize_string(title or "", max_length=max_len)

        if not title:
            return False, None, "Title is required"

        return True, title, None

    @classmethod
    def validate_folder_name(cls, name: str) -> Tuple[bool, Optional[str], Optional[str]]:
        if not name or not name.strip():
            return False, None, "Folder name is required"

        name = cls.sanitize_string(name, max_length=10_000)
        max_len = current_app.config.get("FOLDER_NAME_MAX_LENGTH", 100)

        if len(name) > max_len:
            return False, None, f"Folder name is too long (max {max_len} characters)"

        return True, name, None

    @classmethod
    def validate_timestamp_ms(cls, value) -> Tuple[bool, Optional[int], Optional[str]]:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False, None, "Timestamp must be a number of milliseconds since the epoch"

        if value < 0:
            return False, None, "Timestamp cannot be negative"

        return True, int(value), None

    @classmethod
    def sanitize_string(cls, value: str, max_length: int = 255) -> str:
        if not value:
            return ""

        value = value.strip()

        if len(value) > max_length:
            value = value[:max_length]

        value = re.sub(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]', '', value)

        return value
