# server/biolink/utils/helpers.py

import hashlib
from typing import Any, Dict


def hash_string(value: str, algorithm: str = "sha256") -> str:
    if algorithm == "md5":
        return hashlib.md5(value.encode()).hexdigest()
    elif algorithm == "sha256":
        return hashlib.sha256(value.encode()).hexdigest()
    else:
        raise ValueError(f"Unsupported algorithm: {algorithm}")


def safe_get(data: Dict, *keys, default: Any = None) -> Any:
    for key in keys:
        if isinstance(data, dict):
            data = data.get(key, default)
        elif isinstance(data, list) and isinstance(key, int):
            data = data[key] if -len(data) <= key < len(data) else default
        else:
            return default
    return data


def clean_dict(d: Dict, remove_none: bool = True, remove_empty: bool = False) -> Dict:
    result = {}
    for key, value in d.items():
        if remove_none and value is None:
            continue
        if remove_empty and value in ("", [], {}):
            continue
        result[key] = value
    return result
