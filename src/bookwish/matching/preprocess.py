# ABOUTME: Repairs ambiguous "Title by Author" request input before it reaches the matchers.
# ABOUTME: Strips redundant author suffixes and swaps in the real author of likely biographies.

import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

_BY_SEPARATOR = " by "

# Title words that suggest a biography of the person named before " by ".
_BIOGRAPHY_HINTS = ("biography", "life", "lives", "study of")

# "<Name> by <Biographer>" leading segments are typically a short personal name.
_MAX_SUBJECT_WORDS = 4


@dataclass(frozen=True)
class RequestInput:
    """A raw title/author pair as supplied by the requester."""

    title: str
    author: str = ""
    isbn: str | None = None


def preprocess_book_data(request: RequestInput) -> RequestInput:
    """Detect and repair a "<X> by <Y>" title.

    - "Moby Dick by Herman Melville" with author "Herman Melville" loses the
      redundant suffix.
    - "H.G. Wells by W. Warren Wagar" with author "H.G. Wells" is treated as
      a biography: the author becomes "W. Warren Wagar" and the title stays.

    Returns the input unchanged when neither case applies.
    """
    title = request.title or ""
    if _BY_SEPARATOR not in title or title.startswith("by "):
        return request

    leading, trailing = title.rsplit(_BY_SEPARATOR, 1)
    leading = leading.strip()
    trailing = trailing.strip()
    if not leading or not trailing:
        return request

    author = (request.author or "").strip()
    if trailing.lower() == author.lower():
        logger.info("Title contains redundant author; using %r instead of %r", leading, title)
        return replace(request, title=leading)

    lowered = title.lower()
    if len(leading.split()) <= _MAX_SUBJECT_WORDS or any(h in lowered for h in _BIOGRAPHY_HINTS):
        logger.info(
            "Title %r looks like a biography; using author %r instead of %r",
            title,
            trailing,
            request.author,
        )
        return replace(request, author=trailing)

    return request
