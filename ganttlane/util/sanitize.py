# ganttlane/util/sanitize.py
from __future__ import annotations

import html
import re
from typing import Any, Optional

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HEX_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

NAME_MAX = 100
COMMENT_MAX = 500
GROUP_KEY_MAX = 50


def sanitize_text(value: Any, max_len: int) -> str:
    """Strip script blocks, HTML-escape, then bound the escaped length.

    The cut never splits an `&...;` entity, so the result is at most
    `max_len` characters. Non-string values yield "" (numbers are
    stringified first).
    """
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return ""
    s = html.escape(_SCRIPT_RE.sub("", value).strip(), quote=True)
    if max_len <= 0 or len(s) <= max_len:
        return s
    cut = s[:max_len]
    amp = cut.rfind("&")
    if amp != -1 and ";" not in cut[amp:]:
        cut = cut[:amp]
    return cut


def sanitize_color(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s if _HEX_COLOR_RE.match(s) else None


_UNSAFE_SCHEMES = ("javascript:", "data:", "vbscript:", "file:")


def is_safe_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    # Browsers ignore embedded whitespace/control chars inside the scheme.
    compact = "".join(ch for ch in url if ch.isprintable() and not ch.isspace()).lower()
    if not compact:
        return False
    return not compact.startswith(_UNSAFE_SCHEMES)
