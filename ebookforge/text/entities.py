"""HTML character reference helpers.

Responsibilities:
- Decode numeric character references (`&#65;`, `&#x41;`) to Unicode.
- Unescape the small set of named entities that scraped chapters carry.

Scraped pages often carry double-escaped entities that survive parsing, so
filters call these helpers on the text they keep.
"""

from __future__ import annotations

import re

_CHARACTER_REFERENCE = re.compile(r"&#(?:[xX]([0-9a-fA-F]+)|([0-9]+));")

_NAMED_REPLACEMENTS = (
    ("&quot;", '"'),
    ("&apos;", "'"),
    ("&nbsp;", " "),
    ("&#39;", "'"),
    ("&amp;#39;", "'"),
    ("&amp;", "&"),
)


def _decode_reference(match: re.Match[str]) -> str:
    hex_digits, decimal_digits = match.groups()
    code_point = int(hex_digits, 16) if hex_digits else int(decimal_digits)
    try:
        return chr(code_point)
    except (ValueError, OverflowError):
        return match.group(0)


def decode_crs(text: str) -> str:
    """Decode all numeric HTML character references in `text`."""

    return _CHARACTER_REFERENCE.sub(_decode_reference, text)


def unescape_html(text: str) -> str:
    """Unescape ampersands, numeric references and common named entities.

    `&nbsp;` becomes a plain space so downstream text never carries U+00A0.
    """

    unescaped = decode_crs(text.replace("&amp;", "&"))
    for entity, replacement in _NAMED_REPLACEMENTS:
        unescaped = unescaped.replace(entity, replacement)
    return unescaped
