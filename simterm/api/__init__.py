"""Public API layer for simterm.

Front ends (the bundled CLI, a web UI, an editor plugin) drive the engine
through :class:`Terminal`; nothing outside this package needs to wire the
dispatcher, history store or ranker by hand.
"""

from simterm.api.terminal import DEFAULT_SESSION_NAME, Terminal

__all__ = ["DEFAULT_SESSION_NAME", "Terminal"]
