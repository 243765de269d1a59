"""Engine libraries for simterm.

Each lib is a plain stateful object constructed once per terminal session
and handed to the dispatcher and command handlers.
"""

from simterm.stdlib.lib.autocomplete import AutoCompleteRanker
from simterm.stdlib.lib.history_store import HistoryFormat, HistoryStore
from simterm.stdlib.lib.log_filter import ResultFormat, filter_stats, search_logs
from simterm.stdlib.lib.process_table import ProcessTable
from simterm.stdlib.lib.security import SecurityPolicy, sanitize_filename, validate_url
from simterm.stdlib.lib.session_codec import (
    SessionFormat,
    SessionStatistics,
    clone_session,
    export_session,
    import_session,
    merge_sessions,
    session_statistics,
)
from simterm.stdlib.lib.syntax_highlighter import SyntaxHighlighter

__all__ = [
    "AutoCompleteRanker",
    "HistoryFormat",
    "HistoryStore",
    "ProcessTable",
    "ResultFormat",
    "SecurityPolicy",
    "SessionFormat",
    "SessionStatistics",
    "SyntaxHighlighter",
    "clone_session",
    "export_session",
    "filter_stats",
    "import_session",
    "merge_sessions",
    "sanitize_filename",
    "search_logs",
    "session_statistics",
    "validate_url",
]
