"""Shell-style tokenizer for terminal input lines.

Rules
-----
- Unquoted whitespace separates tokens; runs of whitespace count once.
- ``'...'`` and ``"..."`` open a literal span that only the matching,
  unescaped quote closes. The other quote character is literal inside.
- ``\\`` escapes the next character, inside or outside quotes.
- Quotes may appear mid-token: ``a"b c"d`` is one token ``ab cd``.
- A quote left open runs to the end of the line. This is tolerated, never an
  error; :func:`tokenize` reports it on :attr:`ParsedLine.unterminated_quote`.
- An explicitly quoted empty string (``""``) yields an empty token.
- A trailing lone backslash is kept as a literal backslash.

Examples
--------
>>> parse('echo "hello world"')
['echo', 'hello world']
>>> parse("cp 'a b' c")
['cp', 'a b', 'c']
>>> parse('echo a\\\\ b')
['echo', 'a b']
>>> parse("   ")
[]
"""

from __future__ import annotations

from dataclasses import dataclass, field

from simterm.kernel.logging import get_logger

logger = get_logger(__name__)

_QUOTES = frozenset({"'", '"'})
_SAFE_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789@%+=:,./-_~^*?!#$&()[]{}<>|;"
)


@dataclass(frozen=True, slots=True)
class ParsedLine:
    """Tokens plus the parse ambiguity, if any.

    Attributes
    ----------
    tokens : list[str]
        The command tokens, command name first.
    unterminated_quote : str | None
        The quote character left open at end of input, if any.
    """

    tokens: list[str] = field(default_factory=list)
    unterminated_quote: str | None = None

    @property
    def command(self) -> str | None:
        return self.tokens[0] if self.tokens else None

    @property
    def args(self) -> list[str]:
        return self.tokens[1:]

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def tokenize(line: str) -> ParsedLine:
    """Split ``line`` into tokens and report any unterminated quote."""
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    quote: str | None = None
    i = 0
    length = len(line)

    while i < length:
        char = line[i]

        if char == "\\":
            if i + 1 < length:
                current.append(line[i + 1])
                i += 2
            else:
                current.append(char)
                i += 1
            in_token = True
            continue

        if quote is not None:
            if char == quote:
                quote = None
            else:
                current.append(char)
            i += 1
            continue

        if char in _QUOTES:
            quote = char
            in_token = True
        elif char.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(char)
            in_token = True
        i += 1

    if in_token:
        tokens.append("".join(current))

    if quote is not None:
        logger.debug("Unterminated {quote} quote in input, treating rest as literal", quote=quote)

    return ParsedLine(tokens=tokens, unterminated_quote=quote)


def parse(line: str) -> list[str]:
    """Split ``line`` into command tokens.

    Parameters
    ----------
    line : str
        Raw input line.

    Returns
    -------
    list[str]
        Tokens, command name first; ``[]`` for empty or whitespace-only input.
    """
    return tokenize(line).tokens


def quote(token: str) -> str:
    """Quote a single token so :func:`parse` reads it back unchanged.

    >>> quote("plain")
    'plain'
    >>> quote("two words")
    "'two words'"
    >>> quote("")
    "''"
    """
    if token and all(char in _SAFE_CHARS for char in token):
        return token
    if "'" not in token and "\\" not in token:
        return f"'{token}'"
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def join(tokens: list[str]) -> str:
    """Render tokens as a line such that ``parse(join(tokens)) == tokens``."""
    return " ".join(quote(token) for token in tokens)


__all__ = ["ParsedLine", "join", "parse", "quote", "tokenize"]
