"""Live comment module.

Provides:
- Comments with tips, listed per stream through a Redis-backed cache
- Reports
- NG word moderation with retroactive purge

Note: Router is not exported here to avoid circular imports.
Import directly from livecomment.comments.router when needed.
"""

from .cache import CommentListCache
from .models import LiveComment, LiveCommentReport, NGWord
from .moderation import find_ng_word, is_spam, select_purge_targets
from .service import CommentService


__all__ = [
    "CommentListCache",
    "CommentService",
    "LiveComment",
    "LiveCommentReport",
    "NGWord",
    "find_ng_word",
    "is_spam",
    "select_purge_targets",
]
