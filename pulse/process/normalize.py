"""Text cleanup for harvested titles and summaries."""

from __future__ import annotations

import re

_TAG_RE = re.compile(r"<[^>]*>?")
_ESCAPED_NEWLINE_RE = re.compile(r"\\n")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_content(text: str | None) -> str:
    """Strip markup tags, escaped newlines and whitespace runs.

    An unterminated tag (``<`` with no closing ``>``) is dropped through the
    end of the string. ``None`` and empty input return ``""``.
    """
    if not text:
        return ""
    text = _TAG_RE.sub("", str(text))
    text = _ESCAPED_NEWLINE_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
