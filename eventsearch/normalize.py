from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from typing import Optional

# ============================================================
# Search normalization
# ============================================================

# Combining Diacritical Marks block (U+0300–U+036F).
_COMBINING_MARKS_RE = re.compile(r"[\u0300-\u036f]")

# Literal German folds, applied after decomposition.
_GERMAN_FOLDS = (
    ("ä", "a"),
    ("ö", "o"),
    ("ü", "u"),
    ("ß", "ss"),
)


def normalize_for_search(text: Optional[str]) -> str:
    """
    Comparison form of *text*:
      1. lowercase
      2. Unicode NFD
      3. strip combining diacritical marks
      4. fold ä/ö/ü/ß to a/o/u/ss

    Idempotent: normalize_for_search(normalize_for_search(s)) == normalize_for_search(s).
    The display text is never replaced by this form.
    """
    if not text:
        return ""
    s = unicodedata.normalize("NFD", text.lower())
    s = _COMBINING_MARKS_RE.sub("", s)
    for src, dst in _GERMAN_FOLDS:
        s = s.replace(src, dst)
    return s


def escape_for_pattern(text: str) -> str:
    """Escape regex metacharacters so *text* can be embedded in a pattern."""
    return re.escape(text)


# ============================================================
# Highlighting
# ============================================================

@dataclass(frozen=True)
class HighlightSpan:
    before: str
    match: str
    after: str


def highlight_match(text: str, query: str) -> Optional[HighlightSpan]:
    """
    Split display *text* around the first normalized occurrence of *query*.

    Offsets are taken from the normalized forms, so the split is only exact
    when normalization keeps the length of the prefix (true for everything
    except ß, which expands to two characters).
    """
    if not text or not query:
        return None

    idx = normalize_for_search(text).find(normalize_for_search(query))
    if idx == -1:
        return None

    end = idx + len(query)
    return HighlightSpan(before=text[:idx], match=text[idx:end], after=text[end:])
