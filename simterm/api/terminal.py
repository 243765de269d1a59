"""Terminal facade — one object per simulated terminal session.

Wires the engine parts together (state, VFS, history, autocomplete,
tokenizer, security policy and dispatcher) and exposes the operations a
front end needs: run a line, recall history per tab, ask for completions,
search a tab's output, manage tabs, export and import the session.

Usage
-----
.. code-block:: python

    from simterm.api import Terminal

    terminal = Terminal.create()
    outputs = await terminal.run("ls -la")
    suggestions = terminal.suggest("gi")
    data = terminal.export_session("json")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from simterm.drivers.vfs.memory import InMemoryVFS
from simterm.kernel.config import SimTermConfig, load_config
from simterm.kernel.dispatcher import CommandDispatcher
from simterm.kernel.domain.completion import CompletionContext
from simterm.kernel.domain.history import RESET_CURSOR, HistoryCursor
from simterm.kernel.domain.session import Session, Tab
from simterm.kernel.domain.terminal import TerminalState, default_environment
from simterm.kernel.exceptions import ResourceNotFoundError, ValidationError
from simterm.kernel.logging import get_logger, reset_session_id, set_session_id
from simterm.kernel.utils.time import now_ms
from simterm.stdlib.adapters import InMemoryStorage, JsonFileStorage
from simterm.stdlib.commands import default_registry
from simterm.stdlib.lib.autocomplete import AutoCompleteRanker, CommandInfo
from simterm.stdlib.lib.history_store import HistoryStore
from simterm.stdlib.lib.log_filter import filter_stats, parse_filter_query
from simterm.stdlib.lib.log_filter import search_logs as find_in_logs
from simterm.stdlib.lib.security import SecurityPolicy
from simterm.stdlib.lib.session_codec import SessionFormat
from simterm.stdlib.lib.session_codec import export_session as encode_session
from simterm.stdlib.lib.session_codec import import_session as decode_session
from simterm.stdlib.lib.syntax_highlighter import SyntaxHighlighter

if TYPE_CHECKING:
    from simterm.kernel.domain.completion import AutoCompleteItem
    from simterm.kernel.domain.output import (
        LogFilter,
        LogFilterStats,
        LogSearchResult,
        OutputEntry,
    )
    from simterm.kernel.ports.ai import AIEnhancer
    from simterm.kernel.ports.storage import PersistencePort
    from simterm.kernel.ports.vfs import VFS
    from simterm.kernel.utils.time import Clock
    from simterm.stdlib.commands.base import CommandRegistry

logger = get_logger(__name__)

DEFAULT_SESSION_NAME = "Terminal Session"


class Terminal:
    """A complete simulated terminal session.

    Parameters
    ----------
    config : SimTermConfig | None
        Engine settings; defaults apply when omitted.
    vfs : VFS | None
        Filesystem to operate on; defaults to the seeded sample workspace.
    durable_history : PersistencePort | None
        Long-lived history store. When omitted, ``history.storage = "file"``
        selects a :class:`JsonFileStorage` at ``history.path``.
    ai : AIEnhancer | None
        Backend for the AI commands.
    registry : CommandRegistry | None
        Command table; defaults to every built-in command.
    clock : Clock | None
        Millisecond clock shared by every component.
    """

    def __init__(
        self,
        config: SimTermConfig | None = None,
        *,
        vfs: VFS | None = None,
        durable_history: PersistencePort[list[dict[str, Any]]] | None = None,
        ai: AIEnhancer | None = None,
        registry: CommandRegistry | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or SimTermConfig()
        self._clock = clock or now_ms

        self.state = TerminalState(
            vfs=vfs or InMemoryVFS.with_defaults(self.config.user, self._clock),
            environment=default_environment(self.config.user, self.config.hostname),
        )

        if durable_history is None and self.config.history.storage == "file":
            durable_history = JsonFileStorage(self.config.history.path or "")
        self.history = HistoryStore(
            durable_history,
            InMemoryStorage("session-history"),
            max_size=self.config.history.effective_max_size,
            clock=self._clock,
        )

        self.registry = registry or default_registry()
        self.ranker = AutoCompleteRanker()
        self.ranker.add_commands({
            spec.name: CommandInfo(spec.description) for spec in self.registry.specs()
        })
        self.highlighter = SyntaxHighlighter(
            cache_size=self.config.syntax.cache_size,
            default_language=self.config.syntax.default_language,
        )
        self.security = SecurityPolicy(self.config.security)
        self.dispatcher = CommandDispatcher(
            self.registry,
            self.history,
            self.highlighter,
            security=self.security if self.config.security.enabled else None,
            ai=ai,
            config=self.config.dispatcher,
            clock=self._clock,
        )

        now = self._clock()
        self.session = Session(name=DEFAULT_SESSION_NAME, created_at=now, updated_at=now)
        self._cursors: dict[str, HistoryCursor] = {}
        self.active_tab_id = self.new_tab().id

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(cls, config: SimTermConfig | None = None, **kwargs: Any) -> Terminal:
        """Build a terminal from an already-loaded configuration."""
        return cls(config, **kwargs)

    @classmethod
    def from_config_file(cls, path: str | Path | None = None, **kwargs: Any) -> Terminal:
        """Build a terminal from ``simterm.toml`` (or the file at ``path``)."""
        return cls(load_config(path), **kwargs)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, line: str, tab_id: str | None = None) -> list[OutputEntry]:
        """Execute one input line in a tab (the active one by default).

        A recorded line resets the history cursor of every tab, since all tabs
        share one store and an eviction at the bound shifts every position.
        The next up-arrow then starts from the most recent command again.
        """
        tab = self._tab(tab_id)
        token = set_session_id(self.session.id)
        try:
            outputs = await self.dispatcher.execute(line, self.state, tab)
        finally:
            reset_session_id(token)
        if line.strip():
            self._cursors.clear()
            self.ranker.record(line.strip())
            self.session.touch(self._clock())
        else:
            self._cursors.pop(tab.id, None)
        return outputs

    def suggest(self, current_input: str, cursor: int | None = None) -> list[AutoCompleteItem]:
        """Completion candidates for the word before ``cursor``."""
        context = CompletionContext(
            current_input=current_input,
            cursor_position=cursor,
            history=self.history.commands(),
            environment=dict(self.state.environment),
        )
        return self.ranker.suggest(context)

    # ------------------------------------------------------------------
    # History recall
    # ------------------------------------------------------------------

    def previous(self, tab_id: str | None = None) -> str | None:
        """Up-arrow: the command before the one last recalled in this tab."""
        tab = self._tab(tab_id)
        command, self._cursors[tab.id] = self.history.previous(
            self._cursors.get(tab.id, RESET_CURSOR)
        )
        return command

    def next(self, tab_id: str | None = None) -> str | None:
        """Down-arrow: ``""`` once the walk moves past the newest command."""
        tab = self._tab(tab_id)
        command, self._cursors[tab.id] = self.history.next(
            self._cursors.get(tab.id, RESET_CURSOR)
        )
        return command

    # ------------------------------------------------------------------
    # Output log search
    # ------------------------------------------------------------------

    def search_logs(
        self, log_filter: LogFilter | str | None = None, tab_id: str | None = None
    ) -> list[LogSearchResult]:
        """Search a tab's output log, highest score first.

        A string filter is read with
        :func:`~simterm.stdlib.lib.log_filter.parse_filter_query`, e.g.
        ``"level:error npm"``.
        """
        if isinstance(log_filter, str):
            log_filter = parse_filter_query(log_filter)
        return find_in_logs(self._tab(tab_id).logs, log_filter, clock=self._clock)

    def log_stats(
        self, log_filter: LogFilter | str | None = None, tab_id: str | None = None
    ) -> LogFilterStats:
        if isinstance(log_filter, str):
            log_filter = parse_filter_query(log_filter)
        return filter_stats(self._tab(tab_id).logs, log_filter, clock=self._clock)

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------

    @property
    def tabs(self) -> list[Tab]:
        return list(self.session.tabs)

    @property
    def active_tab(self) -> Tab:
        return self._tab(self.active_tab_id)

    def new_tab(self, name: str | None = None) -> Tab:
        """Open a tab and make it active."""
        now = self._clock()
        tab = Tab(
            name=name or f"Terminal {len(self.session.tabs) + 1}",
            created_at=now,
            updated_at=now,
        )
        self.session.tabs.append(tab)
        self.active_tab_id = tab.id
        self.session.touch(now)
        logger.debug("Opened tab {tab_id} ({name})", tab_id=tab.id, name=tab.name)
        return tab

    def switch_tab(self, tab_id: str) -> Tab:
        tab = self._tab(tab_id)
        self.active_tab_id = tab.id
        return tab

    def close_tab(self, tab_id: str) -> None:
        """Close a tab. The last remaining tab cannot be closed.

        Raises
        ------
        ResourceNotFoundError
            If no tab has this id.
        ValidationError
            If it is the only open tab.
        """
        tab = self._tab(tab_id)
        if len(self.session.tabs) == 1:
            raise ValidationError("tab_id", "cannot close the last open tab", tab_id)
        self.session.tabs.remove(tab)
        self._cursors.pop(tab.id, None)
        if self.active_tab_id == tab.id:
            self.active_tab_id = self.session.tabs[-1].id
        self.session.touch(self._clock())

    def _tab(self, tab_id: str | None) -> Tab:
        tab = self.session.get_tab(tab_id or self.active_tab_id)
        if tab is None:
            raise ResourceNotFoundError(
                "tab", str(tab_id), [existing.id for existing in self.session.tabs]
            )
        return tab

    # ------------------------------------------------------------------
    # Session export / import
    # ------------------------------------------------------------------

    def snapshot(self) -> Session:
        """The session with environment, aliases and history synced from live state."""
        self.session.environment = dict(self.state.environment)
        self.session.aliases = dict(self.state.aliases)
        self.session.history = self.history.entries()
        return self.session

    def export_session(self, fmt: SessionFormat | str = SessionFormat.JSON) -> str:
        return encode_session(self.snapshot(), fmt)

    def import_session(self, data: str, fmt: str = "json") -> Session:
        """Replace the current session with an exported one.

        Validation happens before any state changes; a rejected payload
        leaves the terminal untouched.

        Raises
        ------
        ImportValidationError
            If the payload is not a valid JSON session export.
        """
        session = decode_session(data, fmt, clock=self._clock)
        if not session.tabs:
            now = self._clock()
            session.tabs.append(Tab(name="Terminal 1", created_at=now, updated_at=now))

        self.history.import_history(json.dumps([entry.to_wire() for entry in session.history]))
        environment = dict(session.environment)
        cwd = environment.get("PWD")
        target = self.state.vfs.get(cwd) if cwd else None
        if target is None or not target.is_directory:
            environment["PWD"] = environment.get("HOME", self.state.home)
        self.state.environment = environment
        if session.aliases:
            self.state.aliases = dict(session.aliases)

        self.session = session
        self.active_tab_id = session.tabs[0].id
        self._cursors.clear()
        logger.info("Session {session_id} is now active", session_id=session.id)
        return session


__all__ = ["DEFAULT_SESSION_NAME", "Terminal"]
