"""Text encoding for the JSON-valued columns. Decoding never raises."""
import json
from typing import Any


def encode_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def decode_json(raw: str | None) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def decode_string_list(raw: str | None) -> list[str]:
    value = decode_json(raw)
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def decode_mapping(raw: str | None) -> dict[str, Any]:
    value = decode_json(raw)
    return value if isinstance(value, dict) else {}
