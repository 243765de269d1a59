"""Regex syntax tokenizer for 17 languages.

Each language has an *ordered* table of ``(token type, pattern)`` pairs.
Patterns run one after another over the whole input; a match is kept only
if none of its characters were claimed by an earlier match. Table order is
therefore the priority order and decides which type wins an ambiguous span
(keywords are claimed before strings and comments, so ``// if`` yields a
keyword token for ``if`` and no comment token).

Results are cached per ``(language, code)`` in a FIFO cache.
"""

from __future__ import annotations

import html
import re
from typing import Final

from simterm.kernel.domain.syntax import TOKEN_COLORS, SyntaxToken, TokenType
from simterm.kernel.logging import get_logger
from simterm.kernel.utils.caching import FIFOCache

logger = get_logger(__name__)

PatternTable = tuple[tuple[TokenType, re.Pattern[str]], ...]

KEYWORD = TokenType.KEYWORD
STRING = TokenType.STRING
NUMBER = TokenType.NUMBER
COMMENT = TokenType.COMMENT
FUNCTION = TokenType.FUNCTION
OPERATOR = TokenType.OPERATOR
VARIABLE = TokenType.VARIABLE
CLASS = TokenType.CLASS


def _words(*words: str, flags: int = 0) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(words) + r")\b", flags)


def _rx(pattern: str, flags: int = 0) -> re.Pattern[str]:
    return re.compile(pattern, flags)


# Shared building blocks
_DQ = r'"(?:[^"\\\n]|\\.)*"'
_SQ = r"'(?:[^'\\\n]|\\.)*'"
_BT = r"`(?:[^`\\]|\\.)*`"
_QUOTED = _rx(f"{_DQ}|{_SQ}")
_QUOTED_OR_TEMPLATE = _rx(f"{_DQ}|{_SQ}|{_BT}")
_C_COMMENT = _rx(r"//[^\n]*|/\*[\s\S]*?\*/")
_HASH_COMMENT = _rx(r"#[^\n]*")
_NUMBER = _rx(r"\b\d+(?:\.\d+)?\b")
_CALL = _rx(r"\b[A-Za-z_$][\w$]*(?=\s*\()")
_CALL_PLAIN = _rx(r"\b[A-Za-z_]\w*(?=\s*\()")
_CAPITALIZED = _rx(r"\b[A-Z]\w*\b")
_C_OPERATORS = _rx(r"[+\-*/%=<>!&|^~?:]")
_MARKUP_TAG = r"</?[A-Za-z][\w:.-]*|/?>"

_JS_KEYWORDS = (
    "const", "let", "var", "function", "return", "if", "else", "for", "while", "do",
    "switch", "case", "break", "continue", "try", "catch", "finally", "throw", "async",
    "await", "class", "extends", "import", "export", "default", "from", "new", "this",
    "super", "static", "get", "set", "typeof", "instanceof", "in", "of", "delete",
    "void", "yield",
)  # fmt: skip

_TS_KEYWORDS = _JS_KEYWORDS + (
    "interface", "type", "enum", "namespace", "module", "declare", "public", "private",
    "protected", "readonly", "abstract", "implements",
)  # fmt: skip

_PYTHON_KEYWORDS = (
    "def", "class", "if", "elif", "else", "for", "while", "return", "import", "from",
    "as", "try", "except", "finally", "raise", "with", "lambda", "yield", "pass", "break",
    "continue", "global", "nonlocal", "assert", "del", "and", "or", "not", "in", "is",
    "True", "False", "None",
)  # fmt: skip

_JAVA_KEYWORDS = (
    "public", "private", "protected", "static", "final", "abstract", "class", "interface",
    "extends", "implements", "new", "return", "if", "else", "for", "while", "do", "switch",
    "case", "break", "continue", "try", "catch", "finally", "throw", "throws", "import",
    "package", "void", "int", "long", "double", "float", "boolean", "char", "byte",
    "short", "String",
)  # fmt: skip

_CPP_KEYWORDS = (
    "auto", "break", "case", "char", "const", "continue", "default", "do", "double",
    "else", "enum", "extern", "float", "for", "goto", "if", "inline", "int", "long",
    "register", "return", "short", "signed", "sizeof", "static", "struct", "switch",
    "typedef", "union", "unsigned", "void", "volatile", "while", "class", "namespace",
    "template", "typename", "public", "private", "protected", "virtual", "override",
    "final", "nullptr", "constexpr", "decltype", "using",
)  # fmt: skip

_CSHARP_KEYWORDS = (
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch", "char", "checked",
    "class", "const", "continue", "decimal", "default", "delegate", "do", "double", "else",
    "enum", "event", "explicit", "extern", "false", "finally", "fixed", "float", "for",
    "foreach", "goto", "if", "implicit", "in", "int", "interface", "internal", "is", "lock",
    "long", "namespace", "new", "null", "object", "operator", "out", "override", "params",
    "private", "protected", "public", "readonly", "ref", "return", "sbyte", "sealed",
    "short", "sizeof", "stackalloc", "static", "string", "struct", "switch", "this",
    "throw", "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe", "ushort",
    "using", "virtual", "void", "volatile", "while", "async", "await", "var",
)  # fmt: skip

_GO_KEYWORDS = (
    "break", "case", "chan", "const", "continue", "default", "defer", "else",
    "fallthrough", "for", "func", "go", "goto", "if", "import", "interface", "map",
    "package", "range", "return", "select", "struct", "switch", "type", "var",
)  # fmt: skip

_RUST_KEYWORDS = (
    "as", "break", "const", "continue", "crate", "else", "enum", "extern", "false", "fn",
    "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut", "pub", "ref",
    "return", "self", "Self", "static", "struct", "super", "trait", "true", "type",
    "unsafe", "use", "where", "while", "async", "await", "dyn",
)  # fmt: skip

_PHP_KEYWORDS = (
    "abstract", "and", "array", "as", "break", "callable", "case", "catch", "class",
    "clone", "const", "continue", "declare", "default", "die", "do", "echo", "else",
    "elseif", "empty", "enddeclare", "endfor", "endforeach", "endif", "endswitch",
    "endwhile", "eval", "exit", "extends", "final", "finally", "for", "foreach",
    "function", "global", "goto", "if", "implements", "include", "include_once",
    "instanceof", "insteadof", "interface", "isset", "list", "namespace", "new", "or",
    "print", "private", "protected", "public", "require", "require_once", "return",
    "static", "switch", "throw", "trait", "try", "unset", "use", "var", "while", "xor",
    "yield",
)  # fmt: skip

_RUBY_KEYWORDS = (
    "BEGIN", "END", "alias", "and", "begin", "break", "case", "class", "def", "defined",
    "do", "else", "elsif", "end", "ensure", "false", "for", "if", "in", "module", "next",
    "nil", "not", "or", "redo", "rescue", "retry", "return", "self", "super", "then",
    "true", "undef", "unless", "until", "when", "while", "yield",
)  # fmt: skip

_SQL_KEYWORDS = (
    "SELECT", "FROM", "WHERE", "INSERT", "UPDATE", "DELETE", "CREATE", "ALTER", "DROP",
    "TABLE", "DATABASE", "INDEX", "VIEW", "JOIN", "INNER", "LEFT", "RIGHT", "OUTER", "ON",
    "AND", "OR", "NOT", "IN", "LIKE", "BETWEEN", "IS", "NULL", "ORDER", "BY", "GROUP",
    "HAVING", "LIMIT", "OFFSET", "AS", "DISTINCT", "COUNT", "SUM", "AVG", "MAX", "MIN",
    "UNION", "ALL", "EXISTS", "CASE", "WHEN", "THEN", "ELSE", "END",
)  # fmt: skip

_BASH_KEYWORDS = (
    "if", "then", "else", "elif", "fi", "case", "esac", "for", "while", "until", "do",
    "done", "in", "function", "return", "exit", "break", "continue", "local", "export",
    "readonly", "declare", "typeset", "shift", "eval", "exec", "source", "alias",
    "unalias", "echo", "printf", "read", "cd", "pwd", "ls", "mkdir", "rm", "cp", "mv",
    "cat", "grep", "sed", "awk", "sort", "uniq", "wc", "head", "tail", "find", "chmod",
    "chown", "ps", "kill", "bg", "fg", "jobs", "wait",
)  # fmt: skip

_POWERSHELL_KEYWORDS = (
    "begin", "break", "catch", "continue", "data", "do", "dynamicparam", "else", "elseif",
    "end", "exit", "filter", "finally", "for", "foreach", "from", "function", "if", "in",
    "param", "process", "return", "switch", "throw", "trap", "try", "until", "while",
)  # fmt: skip


def _c_family(keywords: tuple[str, ...], number: str, string: re.Pattern[str]) -> PatternTable:
    return (
        (KEYWORD, _words(*keywords)),
        (STRING, string),
        (NUMBER, _rx(number)),
        (COMMENT, _C_COMMENT),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _C_OPERATORS),
        (CLASS, _CAPITALIZED),
    )


LANGUAGE_PATTERNS: Final[dict[str, PatternTable]] = {
    "javascript": (
        (KEYWORD, _words(*_JS_KEYWORDS)),
        (STRING, _QUOTED_OR_TEMPLATE),
        (NUMBER, _NUMBER),
        (COMMENT, _C_COMMENT),
        (FUNCTION, _CALL),
        (OPERATOR, _C_OPERATORS),
        (CLASS, _CAPITALIZED),
    ),
    "typescript": (
        (KEYWORD, _words(*_TS_KEYWORDS)),
        (STRING, _QUOTED_OR_TEMPLATE),
        (NUMBER, _NUMBER),
        (COMMENT, _C_COMMENT),
        (FUNCTION, _CALL),
        (OPERATOR, _C_OPERATORS),
        (CLASS, _CAPITALIZED),
    ),
    "python": (
        (KEYWORD, _words(*_PYTHON_KEYWORDS)),
        (STRING, _rx(r'"""[\s\S]*?"""|' + r"'''[\s\S]*?'''|" + f"{_DQ}|{_SQ}")),
        (NUMBER, _NUMBER),
        (COMMENT, _HASH_COMMENT),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _rx(r"[+\-*/%=<>!&|^~]")),
        (CLASS, _CAPITALIZED),
    ),
    "java": _c_family(_JAVA_KEYWORDS, r"\b\d+(?:\.\d+)?[fFdDlL]?\b", _QUOTED),
    "cpp": _c_family(_CPP_KEYWORDS, r"\b\d+(?:\.\d+)?[fFlLuU]?\b", _QUOTED),
    "csharp": _c_family(
        _CSHARP_KEYWORDS, r"\b\d+(?:\.\d+)?[fFdDmM]?\b", _rx(r'@"(?:[^"]|"")*"|' + f"{_DQ}|{_SQ}")
    ),
    "go": (
        (KEYWORD, _words(*_GO_KEYWORDS)),
        (STRING, _QUOTED_OR_TEMPLATE),
        (NUMBER, _NUMBER),
        (COMMENT, _C_COMMENT),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _rx(r"[+\-*/%=<>!&|^~:]")),
        (CLASS, _CAPITALIZED),
    ),
    "rust": _c_family(
        _RUST_KEYWORDS,
        r"\b\d+(?:\.\d+)?(?:[iu](?:8|16|32|64|128|size)|f32|f64)?\b",
        _rx(r'r#*"[\s\S]*?"#*|' + f"{_DQ}|{_SQ}"),
    ),
    "php": (
        (KEYWORD, _words(*_PHP_KEYWORDS)),
        (STRING, _QUOTED),
        (NUMBER, _NUMBER),
        (COMMENT, _rx(r"//[^\n]*|/\*[\s\S]*?\*/|#[^\n]*")),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _C_OPERATORS),
        (CLASS, _CAPITALIZED),
    ),
    "ruby": (
        (KEYWORD, _words(*_RUBY_KEYWORDS)),
        (STRING, _QUOTED),
        (NUMBER, _NUMBER),
        (COMMENT, _HASH_COMMENT),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _C_OPERATORS),
        (CLASS, _CAPITALIZED),
    ),
    "html": (
        (KEYWORD, _rx(_MARKUP_TAG)),
        (STRING, _QUOTED),
        (COMMENT, _rx(r"<!--[\s\S]*?-->")),
        (OPERATOR, _rx(r"=")),
        (CLASS, _rx(r"\b[A-Za-z-]+(?==)")),
    ),
    "css": (
        (KEYWORD, _rx(r"@[A-Za-z-]+|\b(?:important|inherit|initial|unset)\b")),
        (STRING, _QUOTED),
        (
            NUMBER,
            _rx(
                r"\b\d+(?:\.\d+)?(?:px|em|rem|%|vh|vw|pt|cm|mm|in|pc|ex|ch|vmin|vmax|deg|rad"
                r"|turn|ms|s)?\b"
            ),
        ),
        (COMMENT, _rx(r"/\*[\s\S]*?\*/")),
        (FUNCTION, _rx(r"\b[A-Za-z-]+(?=\s*\()")),
        (OPERATOR, _rx(r"[{}:;,]")),
        (CLASS, _rx(r"[.#][A-Za-z_-][\w-]*")),
    ),
    "json": (
        (KEYWORD, _words("true", "false", "null")),
        (STRING, _rx(r'"(?:[^"\\]|\\.)*"')),
        (NUMBER, _rx(r"-?\b\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\b")),
        (OPERATOR, _rx(r"[{}\[\]:,]")),
    ),
    "xml": (
        (KEYWORD, _rx(_MARKUP_TAG)),
        (STRING, _QUOTED),
        (COMMENT, _rx(r"<!--[\s\S]*?-->")),
        (OPERATOR, _rx(r"=")),
        (CLASS, _rx(r"\b[A-Za-z:][\w:-]*(?==)")),
    ),
    "sql": (
        (KEYWORD, _words(*_SQL_KEYWORDS, flags=re.IGNORECASE)),
        (STRING, _QUOTED),
        (NUMBER, _NUMBER),
        (COMMENT, _rx(r"--[^\n]*|/\*[\s\S]*?\*/")),
        (FUNCTION, _CALL_PLAIN),
        (OPERATOR, _rx(r"[+\-*/%=<>!]")),
    ),
    "bash": (
        (KEYWORD, _words(*_BASH_KEYWORDS)),
        (STRING, _QUOTED),
        (NUMBER, _NUMBER),
        (COMMENT, _HASH_COMMENT),
        (VARIABLE, _rx(r"\$[A-Za-z_]\w*|\$\{[^}]+\}")),
        (OPERATOR, _rx(r"[|&;<>()$`\\]")),
    ),
    "powershell": (
        (KEYWORD, _words(*_POWERSHELL_KEYWORDS, flags=re.IGNORECASE)),
        (STRING, _QUOTED),
        (NUMBER, _NUMBER),
        (COMMENT, _HASH_COMMENT),
        (FUNCTION, _rx(r"\b[A-Za-z_][\w-]*(?=\s*\()")),
        (OPERATOR, _rx(r"[+\-*/%=<>!&|^~]")),
        (VARIABLE, _rx(r"\$[A-Za-z_]\w*")),
    ),
}

_EXTENSIONS: dict[str, str] = {
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".hpp": "cpp",
    ".h": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".php": "php",
    ".rb": "ruby",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".json": "json",
    ".xml": "xml",
    ".svg": "xml",
    ".sql": "sql",
    ".sh": "bash",
    ".bash": "bash",
    ".ps1": "powershell",
}

_ALIASES: dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "py": "python",
    "c++": "cpp",
    "cs": "csharp",
    "c#": "csharp",
    "golang": "go",
    "rs": "rust",
    "rb": "ruby",
    "sh": "bash",
    "shell": "bash",
    "ps": "powershell",
    "pwsh": "powershell",
}


def supported_languages() -> list[str]:
    """Language identifiers in table order."""
    return list(LANGUAGE_PATTERNS)


def resolve_language(name: str) -> str | None:
    """Canonical identifier for ``name`` or a common alias; None if unsupported.

    >>> resolve_language("TS")
    'typescript'
    >>> resolve_language("cobol") is None
    True
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    return key if key in LANGUAGE_PATTERNS else None


def language_for_filename(filename: str) -> str | None:
    """Guess the language from a file extension.

    >>> language_for_filename("src/app.tsx")
    'typescript'
    """
    dot = filename.rfind(".")
    if dot < 0:
        return None
    return _EXTENSIONS.get(filename[dot:].lower())


class SyntaxHighlighter:
    """Tokenizer with a bounded per-instance cache.

    Parameters
    ----------
    cache_size : int
        Maximum cached ``(language, code)`` results; 0 disables caching.
    default_language : str
        Returned by :meth:`detect_language` when nothing matches.
    """

    def __init__(self, cache_size: int = 100, default_language: str = "javascript") -> None:
        self._cache: FIFOCache[tuple[SyntaxToken, ...]] = FIFOCache(maxsize=cache_size)
        self.default_language = default_language

    def highlight(self, code: str, language: str) -> list[SyntaxToken]:
        """Tokenize ``code``.

        Returns
        -------
        list[SyntaxToken]
            Non-overlapping tokens sorted by ``start_offset``; empty for an
            unsupported language.
        """
        resolved = resolve_language(language)
        if resolved is None:
            logger.debug("No highlighting rules for language {language!r}", language=language)
            return []
        tokens = self._cache.get_or_create(
            (resolved, code), lambda: tuple(self._tokenize(code, LANGUAGE_PATTERNS[resolved]))
        )
        return list(tokens)

    @staticmethod
    def _tokenize(code: str, table: PatternTable) -> list[SyntaxToken]:
        claimed = bytearray(len(code))
        tokens: list[SyntaxToken] = []
        for token_type, pattern in table:
            color = TOKEN_COLORS[token_type]
            for match in pattern.finditer(code):
                start, end = match.span()
                if start == end or any(claimed[start:end]):
                    continue
                claimed[start:end] = b"\x01" * (end - start)
                tokens.append(
                    SyntaxToken(
                        type=token_type,
                        value=match.group(0),
                        start_offset=start,
                        end_offset=end,
                        color=color,
                    )
                )
        tokens.sort(key=lambda token: token.start_offset)
        return tokens

    def detect_language(self, code: str) -> str:
        """Pick the language whose patterns match ``code`` most often.

        Ties go to the language listed first; input with no matches at all
        yields ``default_language``.
        """
        best_language = self.default_language
        best_score = 0
        for language, table in LANGUAGE_PATTERNS.items():
            score = sum(
                1 for _, pattern in table for match in pattern.finditer(code) if match.group(0)
            )
            if score > best_score:
                best_language, best_score = language, score
        return best_language

    def to_html(
        self, code: str, tokens: list[SyntaxToken] | None = None, language: str = ""
    ) -> str:
        """Render ``code`` as HTML with one ``<span>`` per token.

        Text between tokens is escaped and emitted as-is.
        """
        if tokens is None:
            tokens = self.highlight(code, language or self.detect_language(code))
        parts: list[str] = []
        position = 0
        for token in tokens:
            if token.start_offset > position:
                parts.append(html.escape(code[position : token.start_offset]))
            parts.append(
                f'<span class="token-{token.type}" style="color: {token.color}">'
                f"{html.escape(token.value)}</span>"
            )
            position = token.end_offset
        parts.append(html.escape(code[position:]))
        return "".join(parts)

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        """Number of cached results."""
        return len(self._cache)


__all__ = [
    "LANGUAGE_PATTERNS",
    "SyntaxHighlighter",
    "language_for_filename",
    "resolve_language",
    "supported_languages",
]
