"""NG word moderation.

Two checks share one matching rule: an NG word matches a comment when it occurs
in the comment text as a literal, case-sensitive substring. Words are not
patterns; ``%``, ``_`` and regex metacharacters match themselves.

- ``is_spam`` / ``find_ng_word``: post-time filter for a new comment
- ``select_purge_targets``: which existing comments a stream must drop after
  its owner registers a new NG word
"""

from collections.abc import Iterable, Sequence
from typing import Protocol


class CommentText(Protocol):
    """Anything with the fields the purge scan reads (e.g. ``LiveComment``)."""

    id: int
    livestream_id: int
    comment: str


def find_ng_word(text: str, ng_words: Iterable[str]) -> str | None:
    """Return the first NG word (in iteration order) contained in ``text``.

    An empty word matches every text, including the empty one.
    """
    for word in ng_words:
        if word in text:
            return word
    return None


def is_spam(text: str, ng_words: Iterable[str]) -> bool:
    """True if ``text`` contains any of ``ng_words``."""
    return find_ng_word(text, ng_words) is not None


def select_purge_targets(
    stream_id: int,
    comments: Iterable[CommentText],
    ng_words: Sequence[str],
) -> list[int]:
    """Ids of the comments of ``stream_id`` that contain any of ``ng_words``.

    Comments of other streams are never selected, whatever their text.
    Ids are returned in scan order.
    """
    if not ng_words:
        return []

    return [
        comment.id
        for comment in comments
        if comment.livestream_id == stream_id and is_spam(comment.comment, ng_words)
    ]
