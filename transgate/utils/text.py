"""Text helpers for log output.

Upstream error bodies are arbitrary provider text. They are logged for
diagnosis, so they are cleaned of control characters and clipped first.
"""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def truncate_for_log(text: str, max_chars: int = 2000, suffix: str = "...") -> str:
    """Strip control characters and clip text to ``max_chars``.

    Args:
        text: Text to prepare
        max_chars: Maximum characters kept (excluding suffix)
        suffix: Appended when the text was clipped

    Returns:
        Single-log-record-safe text
    """
    if not text:
        return ""

    text = _CONTROL_CHARS.sub("", text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars].rstrip() + suffix
