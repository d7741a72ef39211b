from __future__ import annotations

import re

HEX_COLOR_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """Convert ``#rrggbb`` (or ``rrggbb``) to an RGB tuple.

    Raises:
        ValueError: If ``value`` is not a six digit hex color
    """
    match = HEX_COLOR_RE.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid hex color: {value!r}")
    red, green, blue = (int(part, 16) for part in match.groups())
    return red, green, blue
