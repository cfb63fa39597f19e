from __future__ import annotations

from typing import Dict, Any, Tuple


def get_from_dict(src: Dict, path: Tuple[Any, ...], default_value: Any) -> Any:
    """Provides smart getting values from python dictionary"""
    value = src
    for key in path:
        if not isinstance(value, dict):
            return default_value

        value = value.get(key, None)
        if value is None:
            return default_value
    return value


def hex_to_bytes(value: str) -> bytes:
    if value[:2] in {'0x', '0X'}:
        value = value[2:]
    return bytes.fromhex(value)
