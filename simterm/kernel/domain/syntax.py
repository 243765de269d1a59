"""Domain models for syntax highlighting."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class TokenType(StrEnum):
    """Category a highlighted span belongs to."""

    KEYWORD = "keyword"
    STRING = "string"
    NUMBER = "number"
    COMMENT = "comment"
    FUNCTION = "function"
    OPERATOR = "operator"
    VARIABLE = "variable"
    CLASS = "class"


TOKEN_COLORS: dict[TokenType, str] = {
    TokenType.KEYWORD: "#569CD6",
    TokenType.STRING: "#CE9178",
    TokenType.NUMBER: "#B5CEA8",
    TokenType.COMMENT: "#6A9955",
    TokenType.FUNCTION: "#DCDCAA",
    TokenType.OPERATOR: "#D4D4D4",
    TokenType.VARIABLE: "#9CDCFE",
    TokenType.CLASS: "#4EC9B0",
}


@dataclass(frozen=True, slots=True)
class SyntaxToken:
    """A highlighted span ``code[start_offset:end_offset]``."""

    type: TokenType
    value: str
    start_offset: int
    end_offset: int
    color: str

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["type"] = str(self.type)
        return data


__all__ = ["SyntaxToken", "TOKEN_COLORS", "TokenType"]
