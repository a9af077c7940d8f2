"""Tests for reply utility functions: parse_duration, chunk_text, code_blocks,
truncate and safe_child."""

from __future__ import annotations

from datetime import timedelta

import pytest

from discord_toolbox.domain.shared.exceptions import NotFoundError, ValidationError
from discord_toolbox.domain.shared.messages import ErrorMessages
from discord_toolbox.utils.reply import (
    chunk_text,
    code_blocks,
    parse_duration,
    safe_child,
    truncate,
)


# =============================================================================
# parse_duration
# =============================================================================


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10s", timedelta(seconds=10)),
            ("5m", timedelta(minutes=5)),
            ("2h", timedelta(hours=2)),
            ("1d", timedelta(days=1)),
            ("28d", timedelta(days=28)),
            (" 3M ", timedelta(minutes=3)),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "10", "m5", "5w", "1.5h", "-5m"])
    def test_malformed(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_duration(value)
        assert exc_info.value.field == "duration"

    def test_zero_rejected(self):
        with pytest.raises(ValidationError):
            parse_duration("0s")

    def test_longer_than_28_days_rejected(self):
        with pytest.raises(ValidationError):
            parse_duration("29d")

    @pytest.mark.parametrize("value", ["99999999999d", "999999999999999999999s"])
    def test_huge_values_rejected_as_out_of_range(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_duration(value)
        assert exc_info.value.message == ErrorMessages.DURATION_OUT_OF_RANGE


# =============================================================================
# chunk_text / code_blocks
# =============================================================================


class TestChunkText:
    def test_short_text_single_chunk(self):
        assert chunk_text("hello", 10) == ["hello"]

    def test_empty_text(self):
        assert chunk_text("", 10) == []

    def test_prefers_line_breaks(self):
        assert chunk_text("aaaa\nbbbb\ncccc", 10) == ["aaaa\nbbbb\n", "cccc"]

    def test_long_line_hard_split(self):
        chunks = chunk_text("x" * 25, 10)
        assert chunks == ["x" * 10, "x" * 10, "x" * 5]

    def test_no_chunk_exceeds_size(self):
        text = "\n".join("line %d %s" % (i, "y" * (i % 30)) for i in range(200))
        chunks = chunk_text(text, 100)
        assert all(len(c) <= 100 for c in chunks)
        assert "".join(chunks) == text

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            chunk_text("abc", 0)


class TestCodeBlocks:
    def test_wraps_output(self):
        assert code_blocks("Already up to date.") == ["```\nAlready up to date.\n```"]

    def test_blank_output(self):
        assert code_blocks("   \n") == ["```\n(no output)\n```"]

    def test_blocks_fit_message_size(self):
        blocks = code_blocks("z" * 500, 100)
        assert len(blocks) > 1
        assert all(len(b) <= 100 for b in blocks)


# =============================================================================
# truncate
# =============================================================================


class TestTruncate:
    def test_short_unchanged(self):
        assert truncate("hello", 10) == "hello"

    def test_exact_length_unchanged(self):
        assert truncate("abcde", 5) == "abcde"

    def test_long_truncated_with_ellipsis(self):
        result = truncate("abcdefghij", 5)
        assert result == "abcd…"
        assert len(result) == 5


# =============================================================================
# safe_child
# =============================================================================


class TestSafeChild:
    def test_existing_file(self, tmp_path):
        (tmp_path / "airhorn.mp3").write_bytes(b"ID3")
        assert safe_child(tmp_path, "airhorn.mp3") == (tmp_path / "airhorn.mp3").resolve()

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError) as exc_info:
            safe_child(tmp_path, "missing.mp3")
        assert "missing.mp3" in exc_info.value.message

    def test_path_traversal_rejected(self, tmp_path):
        sounds = tmp_path / "sounds"
        sounds.mkdir()
        (tmp_path / "secret.txt").write_text("token")

        with pytest.raises(NotFoundError):
            safe_child(sounds, "../secret.txt")

    def test_nested_path_rejected(self, tmp_path):
        nested = tmp_path / "sub"
        nested.mkdir()
        (nested / "clip.mp3").write_bytes(b"")

        with pytest.raises(NotFoundError):
            safe_child(tmp_path, "sub/clip.mp3")
