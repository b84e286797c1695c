import re
from typing import Any, Dict

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def normalize_choice_value(s: str) -> str:
    """Turn a loosely typed option ("Video Calls", "video_calls") into its stored value."""
    return normalize_text(s).replace("_", "-").replace(" ", "-")


def normalize_name(name: str) -> str:
    return " ".join(name.strip().split())


def camel_to_snake(key: str) -> str:
    if "_" in key or key.islower():
        return key
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _is_blank(v: Any) -> bool:
    return v is None or v == "" or v == [] or v == ()


def normalize_record_keys(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Collapse camelCase form-state keys and snake_case row keys into snake_case.

    When a record carries both spellings of a field, the camelCase value is
    kept unless it is blank.
    """
    out: Dict[str, Any] = {}
    camel_keys = set()
    for key, value in record.items():
        snake = camel_to_snake(key)
        is_camel = snake != key
        if snake not in out:
            out[snake] = value
            if is_camel:
                camel_keys.add(snake)
            continue
        existing_is_camel = snake in camel_keys
        if is_camel and not _is_blank(value):
            out[snake] = value
            camel_keys.add(snake)
        elif not is_camel and existing_is_camel and _is_blank(out[snake]):
            out[snake] = value
    return out


def normalize_bool(v: Any) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in {"true", "yes", "1", "on"}
    return bool(v)
