# nomicose/domain/common/validation.py
from __future__ import annotations

import re
from typing import Any, Dict, Iterable

from nomicose.domain.common.errors import InvalidInput

# markup-significant characters are never stored
_DENYLIST = re.compile(r"[<>\"'&]")


def _printable(s: str) -> str:
    return "".join(ch for ch in s if ch.isprintable())


def sanitize_text(value: Any, max_len: int) -> str:
    """Trim, drop markup and control characters, cap at max_len."""
    if not isinstance(value, str):
        return ""
    s = _DENYLIST.sub("", _printable(value.strip()))
    return s[:max_len].strip()


def clean_name(value: Any, *, min_len: int = 2, max_len: int = 20) -> str:
    """
    Validate a display name.
    Raises InvalidInput (a ValueError) so it can back a pydantic validator.
    """
    if not isinstance(value, str):
        raise InvalidInput("Name must be a string")
    name = _DENYLIST.sub("", _printable(value.strip())).strip()
    if len(name) < min_len:
        raise InvalidInput(f"Name must be at least {min_len} characters")
    if len(name) > max_len:
        raise InvalidInput(f"Name is too long (max {max_len} characters)")
    return name


def sanitize_answers(raw: Dict[str, Any], categories: Iterable[str], max_len: int = 50) -> Dict[str, str]:
    """
    Keep only known categories, in category order.
    Missing categories become "".
    """
    raw = raw if isinstance(raw, dict) else {}
    return {cat: sanitize_text(raw.get(cat, ""), max_len) for cat in categories}
