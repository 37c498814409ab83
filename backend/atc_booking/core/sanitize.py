"""Free-text sanitation applied at the API boundary."""

import re
from typing import Any, Optional

from .constants import MAX_NOTES_LENGTH

_MARKUP_CHARS = re.compile(r"[<>\"'`]")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def clean_text(value: Any, max_length: int = MAX_NOTES_LENGTH) -> str:
    """
    Strip markup and control characters, trim, and bound the length.

    Non-string values are stringified first; ``None`` becomes ``""``.
    """
    if value is None:
        return ""
    text = value if isinstance(value, str) else str(value)
    text = text[:max_length]
    text = _CONTROL_CHARS.sub("", _MARKUP_CHARS.sub("", text))
    return text.strip()


def clean_optional(value: Optional[str], max_length: int = MAX_NOTES_LENGTH) -> Optional[str]:
    """Like :func:`clean_text` but keeps ``None`` as ``None``."""
    if value is None:
        return None
    return clean_text(value, max_length)
