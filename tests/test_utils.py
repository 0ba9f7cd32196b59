# tests/test_utils.py
from __future__ import annotations

import pytest

from shelld.utils import (
    arg_by_index,
    final_arg,
    format_size,
    has_switch,
    tokenize,
)

# ----------------------------------------------------------------
# tokenize
# ----------------------------------------------------------------


def test_tokenize_splits_on_spaces():
    assert tokenize(b"ls -l", 16) == ["ls", "-l"]


def test_tokenize_collapses_runs_of_spaces():
    assert tokenize(b"  a   b  ", 16) == ["a", "b"]


def test_tokenize_empty_and_blank_lines_give_no_tokens():
    assert tokenize(b"", 16) == []
    assert tokenize(b"    ", 16) == []


def test_tokenize_backtick_quotes_keep_inner_quotes():
    line = b'echo `"key": "value"` > file.txt'
    assert tokenize(line, 16) == ["echo", '"key": "value"', ">", "file.txt"]


@pytest.mark.parametrize("quote", [b"'", b'"', b"`"])
def test_tokenize_each_quote_kind_groups_spaces(quote: bytes):
    line = b"say " + quote + b"hello there" + quote + b" now"
    assert tokenize(line, 16) == ["say", "hello there", "now"]


def test_tokenize_unterminated_quote_runs_to_end_of_line():
    assert tokenize(b"echo 'abc def", 16) == ["echo", "abc def"]


def test_tokenize_empty_quoted_token_is_kept():
    assert tokenize(b"echo '' x", 16) == ["echo", "", "x"]


def test_tokenize_tab_is_not_a_separator():
    assert tokenize(b"a\tb c", 16) == ["a\tb", "c"]


def test_tokenize_last_allowed_token_takes_rest_of_line():
    assert tokenize(b"a b c  d", 2) == ["a", "b c  d"]
    assert tokenize(b"a b c d", 3) == ["a", "b", "c d"]


def test_tokenize_single_token_limit():
    assert tokenize(b"  one two", 1) == ["one two"]


def test_tokenize_maps_high_bytes_to_latin1():
    assert tokenize(b"caf\xe9 x", 16) == ["caf\xe9", "x"]


# ----------------------------------------------------------------
# Argument helpers
# ----------------------------------------------------------------


def test_has_switch():
    assert has_switch("-l", ["-l", "dir"])
    assert not has_switch("-l", ["dir"])


def test_final_arg():
    assert final_arg(["a", "b"]) == "b"
    assert final_arg([]) is None


def test_arg_by_index():
    args = ["x", "y"]
    assert arg_by_index(0, args) == "x"
    assert arg_by_index(1, args) == "y"
    assert arg_by_index(2, args) is None
    assert arg_by_index(-1, args) is None


# ----------------------------------------------------------------
# format_size
# ----------------------------------------------------------------


@pytest.mark.parametrize(
    "nbytes,expected",
    [
        (0, "0b"),
        (999, "999b"),
        (1000, "1000b"),
        (1500, "1kb"),
        (2_500_000, "2Mb"),
        (3_000_000_001, "3Gb"),
        (5_000_000_000_000, "5000Gb"),
    ],
)
def test_format_size(nbytes: int, expected: str):
    assert format_size(nbytes) == expected
