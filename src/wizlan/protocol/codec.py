from __future__ import annotations

import json
from typing import Any

from wizlan.errors import ResponseParseFailed
from wizlan.models.commands import Command


def encode(message: Command | dict[str, Any]) -> bytes:
    """Encode a command (or a raw message mapping) as a JSON datagram."""
    if isinstance(message, dict):
        payload = message
    else:
        payload = message.to_dict()
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def decode(data: bytes) -> Any:
    """Decode a datagram into plain Python data.

    Invalid UTF-8 sequences are replaced with U+FFFD before parsing.

    Raises:
        ResponseParseFailed: If the text is not JSON or nests too deeply
    """
    text = data.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ResponseParseFailed(text, exc) from exc


def method_of(message: Command | dict[str, Any]) -> str | None:
    if isinstance(message, dict):
        method = message.get("method")
        return method if isinstance(method, str) else None
    return message.method
