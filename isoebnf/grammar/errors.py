# isoebnf/grammar/errors.py
"""Fatal grammar errors.

Every class here halts the whole parse. A production that merely does not
match returns None instead of raising.

str(err) == "<message> at <startLine>:<startCol>, <endLine>:<endCol>"
"""

from __future__ import annotations
from typing import Optional, Union
from ..scan import Position


class EBNFSyntaxError(SyntaxError):
    def __init__(self, message: str, start: Position, end: Position):
        super().__init__(f"{message} at {start}, {end}")
        self.message = message
        self.start = start
        self.end = end

    def snippet(self, src: Union[bytes, str]) -> str:
        """Source line holding `start`, with a caret under its column."""
        data = src.encode("utf-8") if isinstance(src, str) else bytes(src)
        line_start = self.start.offset - self.start.character
        line_end = line_start
        while line_end < len(data) and data[line_end] not in (0x0A, 0x0D):
            line_end += 1
        line_text = data[line_start:line_end].decode("utf-8", errors="replace")
        caret = " " * self.start.character + "^"
        return f"{line_text}\n{caret}"


class UnterminatedSpecialSequence(EBNFSyntaxError):
    pass

class InvalidEmptyComment(EBNFSyntaxError):
    pass

class UnterminatedComment(EBNFSyntaxError):
    pass

class UnclosedBracket(EBNFSyntaxError):
    pass

class MissingRepetitionSymbol(EBNFSyntaxError):
    pass

# ---- terminal strings ----

class UnterminatedTerminalString(EBNFSyntaxError):
    pass

class InvalidTerminalCharacter(EBNFSyntaxError):
    pass

class EmptyTerminalString(EBNFSyntaxError):
    pass

# ---- syntax rules ----

class RuleError(EBNFSyntaxError):
    """Rule-level error; `rule_name` is the meta-identifier if one was read."""
    def __init__(self, message: str, start: Position, end: Position,
                 rule_name: Optional[str] = None):
        super().__init__(message, start, end)
        self.rule_name = rule_name

class MissingMetaIdentifier(RuleError):
    pass

class MissingDefinitionOperator(RuleError):
    pass

class MissingTerminator(RuleError):
    pass
