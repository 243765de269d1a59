"""Tests for SecurityPolicy and the URL/file-name helpers."""

from __future__ import annotations

import pytest

from simterm.kernel.config import SecurityConfig
from simterm.kernel.exceptions import SecurityRejectionError
from simterm.stdlib.lib.security import SecurityPolicy, sanitize_filename, validate_url


@pytest.fixture
def policy() -> SecurityPolicy:
    return SecurityPolicy()


class TestValidate:
    @pytest.mark.parametrize(
        "line",
        [
            "rm -rf /",
            "sudo rm -rf ~/project",
            "FORMAT c:",
            "echo <script>alert(1)</script>",
            "open javascript:alert(1)",
            'echo <img src=x onerror="x()">',
            "eval(payload)",
        ],
    )
    def test_dangerous_input_is_rejected(self, policy: SecurityPolicy, line: str) -> None:
        with pytest.raises(SecurityRejectionError):
            policy.validate(line)

    @pytest.mark.parametrize(
        "line",
        ["ls -la", "echo information", "rm -rf dist", "git commit -m 'reformat code'"],
    )
    def test_ordinary_input_passes_unchanged(self, policy: SecurityPolicy, line: str) -> None:
        assert policy.validate(line) == line

    def test_over_long_input_is_rejected_not_truncated(self) -> None:
        policy = SecurityPolicy(SecurityConfig(max_input_length=10))
        with pytest.raises(SecurityRejectionError, match="exceeds 10 characters"):
            policy.validate("echo 12345678")

    def test_allow_list(self) -> None:
        policy = SecurityPolicy(SecurityConfig(allowed_commands=("ls", "pwd")))
        assert policy.is_allowed("ls -la")
        assert not policy.is_allowed("cat README.md")

    def test_allow_list_resolves_aliases(self) -> None:
        policy = SecurityPolicy(SecurityConfig(allowed_commands=("ls", "pwd")))
        aliases = {"ll": "ls -la", "where": "pwd", "peek": "cat README.md"}

        assert policy.validate("ll src", aliases) == "ll src"
        assert policy.is_allowed("where", aliases)
        assert not policy.is_allowed("ll src")
        with pytest.raises(SecurityRejectionError, match="'cat' is not in the allowed"):
            policy.validate("peek", aliases)

    def test_alias_definition_is_screened(self, policy: SecurityPolicy) -> None:
        assert not policy.is_allowed("nuke", {"nuke": "rm -rf /"})
        assert policy.is_allowed("nuke", {"nuke": "rm -rf dist"})

    def test_disabled_policy_accepts_everything(self) -> None:
        policy = SecurityPolicy(SecurityConfig(enabled=False))
        assert policy.validate("rm -rf /") == "rm -rf /"

    def test_with_blocked_adds_commands(self, policy: SecurityPolicy) -> None:
        stricter = policy.with_blocked(["curl"])
        assert policy.is_allowed("curl https://example.com")
        assert not stricter.is_allowed("curl https://example.com")
        assert stricter.is_allowed("ncurl")

    def test_error_message(self, policy: SecurityPolicy) -> None:
        with pytest.raises(SecurityRejectionError) as info:
            policy.validate("rm -rf /")
        assert str(info.value) == "Command blocked: command is blocked for security reasons"


class TestHelpers:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://example.com/a?b=1", True),
            ("http://localhost:3000", True),
            ("ftp://files.example.com", True),
            ("javascript:alert(1)", False),
            ("data:text/html,hi", False),
            ("file:///etc/passwd", False),
            ("example.com", False),
            ("", False),
        ],
    )
    def test_validate_url(self, url: str, expected: bool) -> None:
        assert validate_url(url) is expected

    def test_sanitize_filename(self) -> None:
        assert sanitize_filename("../../etc/passwd") == "etcpasswd"
        assert sanitize_filename("..\\..\\boot.ini") == "boot.ini"
        assert sanitize_filename("dir/sub\\file.txt") == "dirsubfile.txt"
        assert sanitize_filename('re:port*?".txt') == "report.txt"
        assert len(sanitize_filename("a" * 300)) == 255
