# server/biolink/utils/__init__.py

from biolink.utils.validators import URLValidator, InputValidator
from biolink.utils.canonicalizer import canonicalize, extract_id
from biolink.utils.visibility import filter_visible, is_visible, now_ms, schedule_state
from biolink.utils.helpers import (
    hash_string,
    safe_get,
    clean_dict,
)

__all__ = [
    "URLValidator",
    "InputValidator",
    "canonicalize",
    "extract_id",
    "filter_visible",
    "is_visible",
    "now_ms",
    "schedule_state",
    "hash_string",
    "safe_get",
    "clean_dict",
]
