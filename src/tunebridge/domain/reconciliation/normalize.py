"""Text normalisation for comparing track titles and artist names.

The rules are tuned for how streaming catalogs label the same recording:
version qualifiers ("- Remastered 2014", "(Mono)"), featuring credits,
typographic punctuation and "&" versus "and".
"""

from __future__ import annotations

import re

_VERSION_VOCABULARY = (
    r"remaster(ed)?(\s+\d{4})?|(\d{4}\s+)?remaster"
    r"|stereo(\s+version)?|mono(\s+(single\s+)?version)?"
    r"|single\s+version|deluxe(\s+edition)?"
    r"|live(\s+(at|version)\b)?"
    r"|bonus\s+track|remix"
    r"|re-recorded"
)

# "Title - 2024 Remaster", "Title / Mono Version", "Title – Live at Winterland"
_SEPARATED_SUFFIX_RE = re.compile(
    r"\s*[-/–—]\s*(" + _VERSION_VOCABULARY + r"|original(\s+mix)?).*$",
    re.IGNORECASE,
)

# "(Remastered 2012)", "[Live]", "(feat. Somebody)"
_BRACKETED_QUALIFIER_RE = re.compile(
    r"\s*[\(\[]("
    + _VERSION_VOCABULARY
    + r"|original(\s+(mix|stereo|mono))?"
    + r"|feat\.?\s+.+|ft\.?\s+.+"
    + r")[\)\]]",
    re.IGNORECASE,
)

_FEATURING_RE = re.compile(r"\s*\b(feat\.?|ft\.?)\s+.*$", re.IGNORECASE)

_DASH_FOLD = str.maketrans({"–": "-", "—": "-"})
_DROPPED_CHARS = str.maketrans(dict.fromkeys("'’\"()[]"))

_MAX_NORMALIZE_PASSES = 8


def strip_version_suffix(title: str) -> str:
    """Remove version qualifiers such as ``(Remastered 2014)`` or ``- Mono``.

    Bracketed qualifiers are removed wherever they appear; separated
    qualifiers only as a trailing clause, leaving the text before the
    separator untouched.

    >>> strip_version_suffix("Suzie Q (Remastered 2014)")
    'Suzie Q'
    """

    stripped = _BRACKETED_QUALIFIER_RE.sub("", title)
    stripped = _SEPARATED_SUFFIX_RE.sub("", stripped)
    return stripped.strip()


def normalize_for_comparison(title: str) -> str:
    """Return the comparison key for a title.

    Removing quotes or brackets can expose a qualifier that the first pass
    could not see (``Song - "Remix"``), so passes repeat until the key is
    stable. That keeps the function idempotent.
    """

    current = title
    for _ in range(_MAX_NORMALIZE_PASSES):
        normalized = _normalize_once(current)
        if normalized == current:
            break
        current = normalized
    return current


def _normalize_once(value: str) -> str:
    value = strip_version_suffix(value)
    value = value.lower()
    value = value.translate(_DASH_FOLD)
    value = value.translate(_DROPPED_CHARS)
    value = _FEATURING_RE.sub("", value)
    value = value.replace(" & ", " and ")
    return value.strip()


def extract_primary_title(normalized: str) -> str:
    """Return the segment before a structural `` / `` or `` - `` separator.

    >>> extract_primary_title("war pigs / lukes wall")
    'war pigs'
    """

    for separator in (" / ", " - "):
        index = normalized.find(separator)
        if index > 0:
            return normalized[:index].strip()
    return normalized


def normalize_artist(artist: str) -> str:
    normalized = normalize_for_comparison(artist)
    if normalized.startswith("the "):
        normalized = normalized[4:]
    return normalized
