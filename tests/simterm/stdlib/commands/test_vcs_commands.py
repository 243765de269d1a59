"""Tests for the git commands."""

from __future__ import annotations

import pytest

from simterm.api import Terminal
from simterm.stdlib.commands.vcs import NOT_A_REPOSITORY


def _messages(outputs) -> list[str]:
    return [entry.message for entry in outputs]


class TestGit:
    @pytest.mark.asyncio()
    async def test_clean_status(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("git status")
        assert output.message == (
            "On branch main\n"
            "Your branch is up to date with 'origin/main'.\n"
            "\n"
            "nothing to commit, working tree clean"
        )

    @pytest.mark.asyncio()
    async def test_add_commit_push(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git add src")) == [
            "Files staged for commit: 2 added, 2 total"
        ]
        (status,) = await terminal.run("status")
        assert "        new file:   src/index.js" in status.message

        (commit,) = await terminal.run('git commit -m "first commit"')
        assert commit.message.startswith("[main ")
        assert commit.message.endswith("] first commit\n 2 files changed, 2 insertions(+)")
        assert terminal.state.git.staged == []

        (status,) = await terminal.run("git status")
        assert "ahead of 'origin/main' by 1 commit." in status.message

        (push,) = await terminal.run("push")
        assert push.message.startswith("To origin\n")
        assert _messages(await terminal.run("git push")) == ["Everything up-to-date"]

    @pytest.mark.asyncio()
    async def test_add_unknown_path(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git add nope.txt")) == [
            "fatal: pathspec 'nope.txt' did not match any files"
        ]

    @pytest.mark.asyncio()
    async def test_commit_without_message(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git commit")) == ['Usage: commit "message"']

    @pytest.mark.asyncio()
    async def test_log(self, terminal: Terminal) -> None:
        (initial,) = await terminal.run("git log")
        assert initial.message.startswith("commit abc1234 (HEAD -> main)")

        await terminal.run('commit -m "add feature"')
        sha = terminal.state.git.commits[-1].sha
        assert _messages(await terminal.run("git log --oneline")) == [
            f"{sha} (HEAD -> main) add feature"
        ]

    @pytest.mark.asyncio()
    async def test_branches(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git checkout -b feature")) == [
            "Switched to a new branch 'feature'"
        ]
        assert _messages(await terminal.run("git branch")) == ["  main\n* feature"]
        assert _messages(await terminal.run("git checkout main")) == [
            "Switched to branch 'main'"
        ]
        assert _messages(await terminal.run("branch -d feature")) == ["Deleted branch feature"]
        assert _messages(await terminal.run("git checkout ghost")) == [
            "error: pathspec 'ghost' did not match any file(s) known to git"
        ]

    @pytest.mark.asyncio()
    async def test_merge(self, terminal: Terminal) -> None:
        await terminal.run("git checkout -b feature")
        await terminal.run('git commit -m "wip"')
        await terminal.run("git checkout main")

        assert _messages(await terminal.run("merge feature")) == [
            "Merge simulation - branch 'feature' merged into 'main' (1 commit)"
        ]
        assert _messages(await terminal.run("merge ghost")) == [
            "merge: ghost - not something we can merge"
        ]

    @pytest.mark.asyncio()
    async def test_diff(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git diff")) == ["No changes"]
        await terminal.run("git add src/utils.js")
        (diff,) = await terminal.run("git diff")
        assert diff.message.startswith("diff --git a/src/utils.js b/src/utils.js")
        assert "+export function greet(name) {" in diff.message

    @pytest.mark.asyncio()
    async def test_uninitialized_repository(self, terminal: Terminal) -> None:
        terminal.state.git.initialized = False

        assert _messages(await terminal.run("git status")) == [NOT_A_REPOSITORY]
        assert _messages(await terminal.run("git init")) == [
            "Initialized empty Git repository in /home/developer/.git/"
        ]
        assert _messages(await terminal.run("git init")) == [
            "Reinitialized existing Git repository in /home/developer/.git/"
        ]

    @pytest.mark.asyncio()
    async def test_unsupported_subcommand(self, terminal: Terminal) -> None:
        assert _messages(await terminal.run("git rebase")) == [
            "Git subcommand 'rebase' not supported in simulation"
        ]
        assert _messages(await terminal.run("git")) == ["Usage: git <subcommand>"]

    @pytest.mark.asyncio()
    async def test_builtin_aliases(self, terminal: Terminal) -> None:
        (output,) = await terminal.run("gs")
        assert output.message.startswith("On branch main")
