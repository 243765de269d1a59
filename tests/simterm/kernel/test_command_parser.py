"""Tests for simterm.kernel.command_parser."""

from __future__ import annotations

import pytest

from simterm.kernel.command_parser import join, parse, quote, tokenize


class TestParse:
    @pytest.mark.parametrize(
        ("line", "expected"),
        [
            ('echo "hello world"', ["echo", "hello world"]),
            ("cp 'a b' c", ["cp", "a b", "c"]),
            ("echo a\\ b", ["echo", "a b"]),
            ("   ", []),
            ("", []),
            ("  ls    -la   src  ", ["ls", "-la", "src"]),
            ("echo \"it's\"", ["echo", "it's"]),
            ("echo 'say \"hi\"'", ["echo", 'say "hi"']),
            ('a"b c"d', ["ab cd"]),
            ('echo \\"quoted\\"', ["echo", '"quoted"']),
        ],
    )
    def test_examples(self, line: str, expected: list[str]) -> None:
        assert parse(line) == expected

    def test_quoted_empty_string_is_a_token(self) -> None:
        assert parse('write notes.txt ""') == ["write", "notes.txt", ""]

    def test_trailing_backslash_is_literal(self) -> None:
        assert parse("echo end\\") == ["echo", "end\\"]

    def test_escape_inside_quotes(self) -> None:
        assert parse('echo "a \\" b"') == ["echo", 'a " b']


class TestTokenize:
    def test_unterminated_quote_is_tolerated(self) -> None:
        parsed = tokenize('echo "hello world')
        assert parsed.tokens == ["echo", "hello world"]
        assert parsed.unterminated_quote == '"'

    def test_terminated_line_has_no_ambiguity(self) -> None:
        parsed = tokenize("git commit -m 'done'")
        assert parsed.unterminated_quote is None
        assert parsed.command == "git"
        assert parsed.args == ["commit", "-m", "done"]

    def test_empty_line(self) -> None:
        parsed = tokenize("\t ")
        assert parsed.is_empty
        assert parsed.command is None
        assert parsed.args == []


class TestJoin:
    @pytest.mark.parametrize(
        "tokens",
        [
            ["ls", "-la"],
            ["echo", "hello world"],
            ["echo", "it's"],
            ["echo", 'say "hi"', "it's"],
            ["write", "f.txt", ""],
            ["echo", "back\\slash"],
            ["grep", "a b", "'x'", '"y"'],
        ],
    )
    def test_round_trip(self, tokens: list[str]) -> None:
        assert parse(join(tokens)) == tokens

    def test_join_is_idempotent_after_one_pass(self) -> None:
        line = "echo  'a b'   \"c d\" e\\ f"
        once = join(parse(line))
        assert join(parse(once)) == once

    def test_plain_tokens_are_not_quoted(self) -> None:
        assert quote("src/index.js") == "src/index.js"
        assert join(["npm", "install", "lodash@4.17.21"]) == "npm install lodash@4.17.21"
