# ABOUTME: Cleans mangled request titles (CamelCase, underscores, run-together words) before catalog queries.
# ABOUTME: Splits "TheTemplarLegacy" into "The Templar Legacy" and spots a leading author name.

import re
from dataclasses import dataclass, replace

import wordninja

from bookwish.matching.preprocess import RequestInput

# Spaceless strings shorter than this ("Dune", "1984") are left alone.
_MIN_CONCAT_LENGTH = 8

_CAMEL_CASE_RE = re.compile(r"[a-z][A-Z]")
_CAMEL_BOUNDARY_RES = (
    re.compile(r"([a-z\d])([A-Z])"),
    re.compile(r"([A-Z]+)([A-Z][a-z])"),
    re.compile(r"([a-zA-Z])(\d)"),
    re.compile(r"(\d)([a-zA-Z])"),
)
_SEPARATOR_RE = re.compile(r"[-_]")
_SPLIT_MARK = "\x00"

# Words common in titles but not in personal names.
_TITLE_STOP_WORDS = frozenset(
    {"the", "a", "an", "of", "and", "in", "on", "at", "to", "for", "by", "with", "from"}
)


def needs_normalization(text: str) -> bool:
    """True for CamelCase, underscore-joined, or long spaceless strings."""
    text = text.strip()
    if not text:
        return False
    if "_" in text or _CAMEL_CASE_RE.search(text):
        return True
    return any(" " not in seg and len(seg) >= _MIN_CONCAT_LENGTH for seg in text.split("-"))


def _split_camel_case(text: str) -> list[str]:
    """Split at lower->upper, acronym->word, and letter<->digit boundaries."""
    marked = text
    for pattern in _CAMEL_BOUNDARY_RES:
        marked = pattern.sub(rf"\1{_SPLIT_MARK}\2", marked)
    return [part for part in marked.split(_SPLIT_MARK) if part] or [text]


def split_concatenated(text: str) -> str:
    """Turn a mangled title into space-separated words.

    Hyphens and underscores split segments, CamelCase splits words, and any
    remaining long all-lowercase run goes through wordninja.
    """
    if not needs_normalization(text):
        return text

    words: list[str] = []
    for segment in _SEPARATOR_RE.split(text):
        segment = segment.strip()
        if not segment:
            continue
        for part in _split_camel_case(segment):
            if part.islower() and len(part) >= _MIN_CONCAT_LENGTH:
                words.extend(wordninja.split(part) or [part])
            else:
                words.append(part)
    return " ".join(words)


def is_likely_person_name(text: str) -> bool:
    """2-3 capitalized words (initials allowed) without title stop words."""
    words = text.split()
    if not 2 <= len(words) <= 3:
        return False
    if not all(word[0].isupper() for word in words):
        return False
    return not any(word.lower() in _TITLE_STOP_WORDS for word in words)


def detect_leading_author(title: str) -> tuple[str, str | None]:
    """Split a leading 3- or 2-word person name off a title.

    Returns (remaining_title, author), with author None when nothing was found.
    """
    words = title.split()
    for name_len in (3, 2):
        if len(words) <= name_len:
            continue
        name = " ".join(words[:name_len])
        if is_likely_person_name(name):
            return " ".join(words[name_len:]), name
    return title, None


@dataclass(frozen=True)
class NormalizationResult:
    """The request as given and the cleaned request used for searching."""

    original: RequestInput
    normalized: RequestInput

    @property
    def was_modified(self) -> bool:
        return self.original != self.normalized


def normalize_request(request: RequestInput) -> NormalizationResult:
    """Clean a mangled title; pull an author out of it only when none was given."""
    if not needs_normalization(request.title):
        return NormalizationResult(original=request, normalized=request)

    title = split_concatenated(request.title)
    author = request.author
    if not author:
        title, detected = detect_leading_author(title)
        author = detected or ""
    return NormalizationResult(
        original=request, normalized=replace(request, title=title, author=author)
    )
