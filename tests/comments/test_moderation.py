"""Tests for NG word matching and purge target selection."""

from types import SimpleNamespace

from livecomment.comments.moderation import (
    find_ng_word,
    is_spam,
    select_purge_targets,
)


def comment(comment_id: int, stream_id: int, text: str) -> SimpleNamespace:
    return SimpleNamespace(id=comment_id, livestream_id=stream_id, comment=text)


class TestFindNGWord:
    """Tests for the post-time filter."""

    def test_substring_match(self) -> None:
        assert find_ng_word("buy cheap pills", ["cheap"]) == "cheap"

    def test_no_match(self) -> None:
        assert find_ng_word("hello there", ["cheap", "spam"]) is None

    def test_returns_first_match_in_order(self) -> None:
        assert find_ng_word("cheap spam", ["spam", "cheap"]) == "spam"

    def test_case_sensitive(self) -> None:
        """Matching is exact; no case folding."""
        assert find_ng_word("CHEAP", ["cheap"]) is None

    def test_metacharacters_are_literal(self) -> None:
        """SQL wildcards and regex syntax match only themselves."""
        assert find_ng_word("100 percent", ["%"]) is None
        assert find_ng_word("a b", ["_"]) is None
        assert find_ng_word("anything", [".*"]) is None
        assert find_ng_word("50% off", ["%"]) == "%"
        assert find_ng_word("snake_case", ["_"]) == "_"

    def test_empty_word_matches_everything(self) -> None:
        assert find_ng_word("hello", [""]) == ""
        assert find_ng_word("", [""]) == ""

    def test_no_words(self) -> None:
        assert find_ng_word("anything", []) is None

    def test_multibyte_text(self) -> None:
        assert is_spam("この配信は最高", ["最高"]) is True
        assert is_spam("この配信は最高", ["最低"]) is False


class TestSelectPurgeTargets:
    """Tests for choosing which comments a new NG word removes."""

    def test_selects_matching_comments_of_stream(self) -> None:
        comments = [
            comment(1, 42, "hello"),
            comment(2, 42, "buy cheap stuff"),
            comment(3, 42, "cheap!"),
        ]
        assert select_purge_targets(42, comments, ["cheap"]) == [2, 3]

    def test_never_selects_other_streams(self) -> None:
        """A matching comment on another stream is left alone."""
        comments = [
            comment(1, 42, "cheap"),
            comment(2, 43, "cheap"),
        ]
        assert select_purge_targets(42, comments, ["cheap"]) == [1]

    def test_rescans_all_words(self) -> None:
        comments = [
            comment(1, 42, "old foo"),
            comment(2, 42, "new bar"),
            comment(3, 42, "clean"),
        ]
        assert select_purge_targets(42, comments, ["foo", "bar"]) == [1, 2]

    def test_no_words_selects_nothing(self) -> None:
        assert select_purge_targets(42, [comment(1, 42, "x")], []) == []

    def test_empty_word_selects_whole_stream(self) -> None:
        comments = [comment(1, 42, "a"), comment(2, 42, ""), comment(3, 43, "b")]
        assert select_purge_targets(42, comments, [""]) == [1, 2]
