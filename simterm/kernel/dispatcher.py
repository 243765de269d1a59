"""Command dispatcher — turns one raw input line into output entries.

Pipeline for :meth:`CommandDispatcher.execute`::

    raw line ─► security check ─► tokenize ─► alias expansion ─► registry lookup
             ─► handler (timeout, optional delay) ─► history record ─► tab log

Every failure mode (blocked input, unknown command, usage errors, VFS
errors, timeouts, unexpected handler exceptions) ends up as a single
``error`` entry plus a history record with ``exit_code = 1``; nothing
propagates to the caller.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from simterm.kernel.command_parser import tokenize
from simterm.kernel.config.models import DispatcherConfig
from simterm.kernel.domain.output import OutputEntry, OutputLevel
from simterm.kernel.exceptions import (
    CommandNotFoundError,
    CommandTimeoutError,
    SimTermError,
    VFSError,
)
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.time import monotonic_ms, now_ms
from simterm.stdlib.commands.base import CommandContext
from simterm.stdlib.lib.process_table import ProcessTable

if TYPE_CHECKING:
    from simterm.kernel.domain.session import Tab
    from simterm.kernel.domain.terminal import TerminalState
    from simterm.kernel.ports.ai import AIEnhancer
    from simterm.kernel.utils.time import Clock
    from simterm.stdlib.commands.base import CommandRegistry, CommandSpec
    from simterm.stdlib.lib.history_store import HistoryStore
    from simterm.stdlib.lib.security import SecurityPolicy
    from simterm.stdlib.lib.syntax_highlighter import SyntaxHighlighter

logger = get_logger(__name__)


class CommandDispatcher:
    """Route input lines to command handlers and record the outcome.

    Parameters
    ----------
    registry : CommandRegistry
        Name and alias table of available commands
    history : HistoryStore
        Receives one entry per non-empty line
    highlighter : SyntaxHighlighter
        Shared with handlers (``highlight``, ``enhance``)
    security : SecurityPolicy | None
        Input validation; ``None`` disables it
    ai : AIEnhancer | None
        Backend for the ``ai``/``enhance``/``suggest`` commands
    config : DispatcherConfig | None
        Per-command timeout and simulated latency
    clock : Clock | None
        Millisecond wall clock for output timestamps
    """

    def __init__(
        self,
        registry: CommandRegistry,
        history: HistoryStore,
        highlighter: SyntaxHighlighter,
        *,
        security: SecurityPolicy | None = None,
        ai: AIEnhancer | None = None,
        config: DispatcherConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self.history = history
        self.highlighter = highlighter
        self.security = security
        self.ai = ai
        self.config = config or DispatcherConfig()
        self._clock = clock or now_ms

    async def execute(
        self, raw_line: str, state: TerminalState, tab: Tab | None = None
    ) -> list[OutputEntry]:
        """Run one input line against ``state``.

        Args
        ----
            raw_line: The line as typed.
            state: Session state the handler reads and mutates.
            tab: When given, outputs and the history entry are appended to it
                (or its log is emptied if the command was ``clear``).

        Returns
        -------
        list[OutputEntry]
            Entries produced by this line; ``[]`` for blank input.
        """
        parsed = tokenize(raw_line)
        if parsed.is_empty:
            return []

        started = monotonic_ms()
        context: CommandContext | None = None
        try:
            if self.security is not None:
                self.security.validate(raw_line, state.aliases)
            tokens = self._expand_alias(parsed.tokens, state)
            spec = self.registry.get(tokens[0])
            if spec is None:
                raise CommandNotFoundError(tokens[0])
            context = self._context(spec, tokens, raw_line, state)
            await self._run(spec, context)
            outputs = context.outputs
        except VFSError as e:
            outputs = self._failure(context, f"{parsed.command}: {e}")
        except SimTermError as e:
            outputs = self._failure(context, str(e))
        except Exception as e:
            logger.exception("Unhandled error executing {line!r}", line=raw_line)
            outputs = self._failure(context, f"Error executing {raw_line}: {e}")

        elapsed = monotonic_ms() - started
        failed = any(entry.is_error for entry in outputs)
        errors = [entry.message for entry in outputs if entry.is_error]
        messages = [entry.message for entry in outputs if not entry.is_error and entry.message]
        entry = self.history.add(
            raw_line,
            execution_time_ms=round(elapsed, 3),
            exit_code=1 if failed else 0,
            output="\n".join(messages) or None,
            error="\n".join(errors) or None,
        )

        if failed:
            logger.warning("Command failed: {line!r} ({error})", line=raw_line, error=errors[0])
        else:
            logger.debug("Executed {line!r} in {elapsed:.2f}ms", line=raw_line, elapsed=elapsed)

        if tab is not None:
            if context is not None and context.clear_requested:
                tab.logs.clear()
            else:
                tab.logs.extend(outputs)
            tab.history.append(entry)
            tab.touch(self._clock())
        return outputs

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _expand_alias(tokens: list[str], state: TerminalState) -> list[str]:
        """Replace a leading user alias with its definition (one level only)."""
        definition = state.aliases.get(tokens[0])
        if definition is None:
            return tokens
        expanded = tokenize(definition).tokens
        if not expanded:
            return tokens
        return [*expanded, *tokens[1:]]

    def _context(
        self, spec: CommandSpec, tokens: list[str], raw_line: str, state: TerminalState
    ) -> CommandContext:
        return CommandContext(
            name=spec.name,
            args=tokens[1:],
            raw=raw_line,
            state=state,
            history=self.history,
            highlighter=self.highlighter,
            processes=ProcessTable(state),
            registry=self.registry,
            ai=self.ai,
            clock=self._clock,
        )

    async def _run(self, spec: CommandSpec, context: CommandContext) -> None:
        delay_ms = self.config.simulated_delay_ms
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)
        timeout = self.config.command_timeout_seconds
        try:
            await asyncio.wait_for(spec.handler(context), timeout=timeout)
        except TimeoutError as e:
            raise CommandTimeoutError(spec.name, timeout or 0.0) from e

    def _failure(self, context: CommandContext | None, message: str) -> list[OutputEntry]:
        """Outputs emitted before the failure, followed by one error entry."""
        outputs = list(context.outputs) if context is not None else []
        outputs.append(
            OutputEntry(level=OutputLevel.ERROR, message=message, timestamp_ms=self._clock())
        )
        return outputs


__all__ = ["CommandDispatcher"]
