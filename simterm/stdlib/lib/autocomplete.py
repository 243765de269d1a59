"""AutoCompleteRanker lib — fuzzy-ranked suggestions for the input line.

Scoring against the word before the cursor (case-insensitive):

==========================  ==========================================
Match                       Score
==========================  ==========================================
exact                       100
prefix                      ``80 + len(word) / len(candidate) * 20``
substring (non-prefix)      60
subsequence                 ``50 * len(word) / matched_span``, rounded
none                        dropped
==========================  ==========================================

Recent-history candidates get +10 and registered custom commands +5. The
result is sorted by score (stable, so earlier registries win ties),
de-duplicated by value and capped at ten items.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from simterm.kernel.domain.completion import AutoCompleteItem, CompletionContext, CompletionType

MAX_SUGGESTIONS = 10
MAX_RECENT = 50
RECENT_BOOST = 10
CUSTOM_BOOST = 5
TOP_SCORE = 100
TOP_RECENT_SCORE = 90
TOP_RECENT_COUNT = 5

TOP_COMMANDS: tuple[str, ...] = ("help", "run", "clear", "ls", "cd", "npm install", "git status")


@dataclass(frozen=True, slots=True)
class CommandInfo:
    """Static description of a completable command."""

    description: str
    args: tuple[str, ...] = ()


COMMAND_DATABASE: dict[str, CommandInfo] = {
    # File operations
    "ls": CommandInfo("List directory contents", ("-l", "-a", "-h")),
    "cd": CommandInfo("Change directory", ("..", "~", "/")),
    "pwd": CommandInfo("Print working directory"),
    "mkdir": CommandInfo("Create directory", ("-p",)),
    "rm": CommandInfo("Remove files/directories", ("-r", "-f", "-rf")),
    "cp": CommandInfo("Copy files/directories", ("-r", "-v")),
    "mv": CommandInfo("Move/rename files", ("-v",)),
    "cat": CommandInfo("Display file contents"),
    "touch": CommandInfo("Create empty file"),
    # Code operations
    "run": CommandInfo("Execute current code"),
    "clear": CommandInfo("Clear console output"),
    "download": CommandInfo("Download current project"),
    "export-session": CommandInfo("Export session data", ("json", "csv", "txt")),
    "import-session": CommandInfo("Import session data"),
    # Git
    "git": CommandInfo(
        "Git version control",
        ("init", "add", "commit", "push", "pull", "status", "log", "branch", "checkout", "merge"),
    ),
    "git init": CommandInfo("Initialize git repository"),
    "git add": CommandInfo("Add files to staging", (".", "-A")),
    "git commit": CommandInfo("Commit changes", ("-m", "-am")),
    "git push": CommandInfo("Push to remote"),
    "git pull": CommandInfo("Pull from remote"),
    "git status": CommandInfo("Show working tree status"),
    # npm
    "npm": CommandInfo(
        "Node package manager", ("install", "uninstall", "update", "list", "run", "init", "test")
    ),
    "npm install": CommandInfo("Install packages", ("--save", "--save-dev", "-g")),
    "npm uninstall": CommandInfo("Uninstall packages"),
    "npm list": CommandInfo("List installed packages"),
    "npm run": CommandInfo("Run script"),
    # System
    "echo": CommandInfo("Display message"),
    "env": CommandInfo("Show environment variables"),
    "export": CommandInfo("Set environment variable"),
    "history": CommandInfo("Show command history"),
    "help": CommandInfo("Show available commands"),
    "status": CommandInfo("Show system status"),
    "theme": CommandInfo("Change theme", ("dark", "light", "monokai", "solarized", "dracula")),
    # Debugging and performance
    "debug": CommandInfo("Toggle debug mode", ("on", "off")),
    "breakpoint": CommandInfo("Set breakpoint", ("add", "remove", "list")),
    "step": CommandInfo("Step through code"),
    "continue": CommandInfo("Continue execution"),
    "inspect": CommandInfo("Inspect variable"),
    "benchmark": CommandInfo("Run performance benchmark"),
    "profile": CommandInfo("Profile code execution"),
    "memory": CommandInfo("Show memory usage"),
    "cpu": CommandInfo("Show CPU usage"),
}

LANGUAGE_KEYWORDS: tuple[str, ...] = (
    "const", "let", "var", "function", "return", "if", "else", "for", "while",
    "do", "switch", "case", "break", "continue", "try", "catch", "finally",
    "throw", "async", "await", "class", "extends", "import", "export", "default",
    "from", "new", "this", "super", "static", "get", "set", "typeof", "instanceof",
)  # fmt: skip

BUILTIN_FUNCTIONS: tuple[str, ...] = (
    "console.log", "console.error", "console.warn", "console.info",
    "Array.from", "Array.isArray", "Object.keys", "Object.values", "Object.entries",
    "JSON.parse", "JSON.stringify", "Math.random", "Math.floor", "Math.ceil",
    "parseInt", "parseFloat", "setTimeout", "setInterval", "Promise.resolve",
    "Promise.reject", "fetch", "document.querySelector", "document.getElementById",
)  # fmt: skip


def fuzzy_score(candidate: str, word: str) -> float:
    """Subsequence score in ``(0, 50]``, or 0 when ``word`` is not a subsequence.

    The tighter the matched characters sit together, the higher the score.

    >>> fuzzy_score("git status", "gst")
    25
    >>> fuzzy_score("echo", "he")
    0
    """
    text, pattern = candidate.lower(), word.lower()
    if not pattern:
        return 0
    first = -1
    position = 0
    for index, char in enumerate(text):
        if char == pattern[position]:
            if first < 0:
                first = index
            position += 1
            if position == len(pattern):
                span = index - first + 1
                return round(50 * len(pattern) / span)
    return 0


def score_candidate(candidate: str, word: str) -> float:
    """Relevance of ``candidate`` for the typed ``word`` (0 means no match).

    >>> score_candidate("he", "he")
    100
    >>> score_candidate("help", "he")
    90.0
    >>> score_candidate("echo", "ch")
    60
    """
    lowered, needle = candidate.lower(), word.lower()
    if not needle:
        return 0
    if lowered == needle:
        return 100
    if lowered.startswith(needle):
        return 80 + len(word) / max(len(candidate), 1) * 20
    if needle in lowered:
        return 60
    return fuzzy_score(candidate, word)


class AutoCompleteRanker:
    """Suggestion engine over commands, keywords, functions, variables and history.

    Parameters
    ----------
    commands : Mapping[str, CommandInfo] | None
        Static command database; defaults to :data:`COMMAND_DATABASE`.
    keywords, functions : Iterable[str] | None
        Language keyword and built-in function registries.
    """

    def __init__(
        self,
        commands: Mapping[str, CommandInfo] | None = None,
        keywords: Iterable[str] | None = None,
        functions: Iterable[str] | None = None,
    ) -> None:
        self._commands: dict[str, CommandInfo] = dict(
            COMMAND_DATABASE if commands is None else commands
        )
        self._keywords = tuple(LANGUAGE_KEYWORDS if keywords is None else keywords)
        self._functions = tuple(BUILTIN_FUNCTIONS if functions is None else functions)
        self._custom: dict[str, AutoCompleteItem] = {}
        self._recent: list[str] = []

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    def add_commands(self, commands: Mapping[str, CommandInfo]) -> None:
        """Merge more entries into the static command database."""
        for name, info in commands.items():
            self._commands.setdefault(name, info)

    def register_command(self, item: AutoCompleteItem) -> None:
        """Register a custom command suggestion (replaces one with the same value)."""
        self._custom[item.value] = item

    def unregister_command(self, value: str) -> bool:
        return self._custom.pop(value, None) is not None

    def command_info(self, name: str) -> CommandInfo | None:
        return self._commands.get(name)

    def commands(self) -> list[str]:
        return list(self._commands)

    def record(self, command: str) -> None:
        """Remember an executed command as a recent candidate (most recent first)."""
        self._recent.insert(0, command)
        del self._recent[MAX_RECENT:]

    def clear_recent(self) -> None:
        self._recent.clear()

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def suggest(self, context: CompletionContext) -> list[AutoCompleteItem]:
        """Ranked suggestions for the word before the cursor."""
        word = context.current_word
        recent = self._recent_commands(context.history)
        if not word:
            return self._rank(self._top_suggestions(recent))

        candidates: list[AutoCompleteItem] = []
        for name, info in self._commands.items():
            candidates.append(
                AutoCompleteItem(
                    value=name,
                    label=name,
                    description=info.description,
                    type=CompletionType.COMMAND,
                    metadata={"args": list(info.args)} if info.args else None,
                )
            )
        candidates.extend(
            AutoCompleteItem(
                value=keyword,
                label=keyword,
                description=f"Keyword: {keyword}",
                type=CompletionType.KEYWORD,
            )
            for keyword in self._keywords
        )
        candidates.extend(
            AutoCompleteItem(
                value=function,
                label=function,
                description=f"Function: {function}",
                type=CompletionType.FUNCTION,
            )
            for function in self._functions
        )

        scored = [
            item.model_copy(update={"score": score})
            for item in candidates
            if (score := score_candidate(item.value, word)) > 0
        ]
        scored.extend(self._variable_suggestions(word, context.environment))

        for command in recent:
            if (score := score_candidate(command, word)) > 0:
                scored.append(
                    AutoCompleteItem(
                        value=command,
                        label=command,
                        description="Recent command",
                        type=CompletionType.COMMAND,
                        score=score + RECENT_BOOST,
                    )
                )

        for value, item in self._custom.items():
            if (score := score_candidate(value, word)) > 0:
                scored.append(item.model_copy(update={"score": score + CUSTOM_BOOST}))

        return self._rank(scored)

    def _variable_suggestions(
        self, word: str, environment: Mapping[str, str]
    ) -> list[AutoCompleteItem]:
        sigil = "$" if word.startswith("$") else ""
        needle = word[1:] if sigil else word
        if not needle:
            names = sorted(environment) if sigil else []
            return [
                AutoCompleteItem(
                    value=f"${name}",
                    label=f"${name}",
                    description="Environment variable",
                    type=CompletionType.VARIABLE,
                    score=50,
                    metadata={"value": environment[name]},
                )
                for name in names
            ]
        items: list[AutoCompleteItem] = []
        for name, value in environment.items():
            if (score := score_candidate(name, needle)) > 0:
                items.append(
                    AutoCompleteItem(
                        value=f"{sigil}{name}",
                        label=f"{sigil}{name}",
                        description="Environment variable",
                        type=CompletionType.VARIABLE,
                        score=score,
                        metadata={"value": value},
                    )
                )
        return items

    def _recent_commands(self, history: list[str]) -> list[str]:
        """Unique commands, most recent first, capped at :data:`MAX_RECENT`."""
        seen: set[str] = set()
        result: list[str] = []
        for command in [*self._recent, *reversed(history)]:
            if command and command not in seen:
                seen.add(command)
                result.append(command)
                if len(result) >= MAX_RECENT:
                    break
        return result

    def _top_suggestions(self, recent: list[str]) -> list[AutoCompleteItem]:
        items = [
            AutoCompleteItem(
                value=command,
                label=command,
                description=info.description,
                type=CompletionType.COMMAND,
                score=TOP_SCORE,
            )
            for command in TOP_COMMANDS
            if (info := self._commands.get(command)) is not None
        ]
        items.extend(
            AutoCompleteItem(
                value=command,
                label=command,
                description="Recent command",
                type=CompletionType.COMMAND,
                score=TOP_RECENT_SCORE,
            )
            for command in recent[:TOP_RECENT_COUNT]
        )
        return items

    @staticmethod
    def _rank(items: list[AutoCompleteItem]) -> list[AutoCompleteItem]:
        ordered = sorted(items, key=lambda item: item.score, reverse=True)
        seen: set[str] = set()
        ranked: list[AutoCompleteItem] = []
        for item in ordered:
            if item.value in seen:
                continue
            seen.add(item.value)
            ranked.append(item)
            if len(ranked) >= MAX_SUGGESTIONS:
                break
        return ranked


__all__ = [
    "AutoCompleteRanker",
    "COMMAND_DATABASE",
    "CommandInfo",
    "fuzzy_score",
    "score_candidate",
]
