# isoebnf/grammar/parser.py
"""ISO/IEC 14977 EBNF parser

Grammar we parse (ISO form, digraphs in parentheses):
    syntax             := {syntax rule}
    syntax rule        := meta identifier "=" definitions list ";"
    definitions list   := single definition {("|" | "/" | "!") single definition}
    single definition  := syntactic term {"," syntactic term}
    syntactic term     := syntactic factor ["-" syntactic factor]
    syntactic factor   := [integer "*"] syntactic primary
    syntactic primary  := optional | repeated | grouped
                        | meta identifier | terminal string | special sequence
                        | (empty)
    optional           := "[" definitions list "]"        ("(/" ... "/)")
    repeated           := "{" definitions list "}"        ("(:" ... ":)")
    grouped            := "(" definitions list ")"

Whitespace and bracketed comments "(* ... *)" may appear between any two
symbols and inside meta identifiers. Comments nest and are collected into
`Grammar.comments`; they never appear in the tree.

Productions return None when they do not match here. Malformed input
(unterminated comment/string/special sequence, unclosed bracket, broken rule)
raises an `EBNFSyntaxError` subclass and ends the parse.
"""

from __future__ import annotations
import sys
import regex as re
from typing import List, Optional, Tuple
from ..scan import Position, ScanOptions, Scanner, Source
from .ast import *
from .errors import (
    EBNFSyntaxError, UnterminatedSpecialSequence, InvalidEmptyComment,
    UnterminatedComment, UnclosedBracket, MissingRepetitionSymbol,
    UnterminatedTerminalString, InvalidTerminalCharacter, EmptyTerminalString,
    MissingMetaIdentifier, MissingDefinitionOperator, MissingTerminator,
)

# ---- symbols ----
_APOSTROPHE = 0x27
_QUOTE      = 0x22
_QMARK      = 0x3F
_LPAREN     = 0x28
_RPAREN     = 0x29
_STAR       = 0x2A
_COMMA      = 0x2C
_MINUS      = 0x2D
_SLASH      = 0x2F
_SEMI       = 0x3B
_EQUALS     = 0x3D

_WHITESPACE = frozenset(b" \t\n\x0b\x0c\r")
_DEFINITION_SEPARATORS = frozenset(b"|/!")

_OPTION_OPEN,  _OPTION_CLOSE = (b"[", b"(/"), (b"]", b"/)")
_REPEAT_OPEN,  _REPEAT_CLOSE = (b"{", b"(:"), (b"}", b":)")
_GROUP_OPEN,   _GROUP_CLOSE  = (b"(",), (b")",)

_WORD_RE   = re.compile(rb"[A-Za-z0-9]+")
_DIGITS_RE = re.compile(rb"[0-9]+")
# printable ASCII minus the quote that opened the string
_TERMINAL_RE = {
    _APOSTROPHE: re.compile(rb"[\x20-\x26\x28-\x7e]+"),
    _QUOTE:      re.compile(rb"[\x20\x21\x23-\x7e]+"),
}


def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)

def _is_letter(c: Optional[int]) -> bool:
    if c is None:
        return False
    return 0x41 <= c <= 0x5A or 0x61 <= c <= 0x7A

def _trim(data: bytes) -> bytes:
    return data.strip(b" \t\n\x0b\x0c\r")

def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


_Mark = Tuple[Position, int]


class _Parser:
    def __init__(self, src: Source, options: Optional[ScanOptions] = None, debug: bool = False):
        self.sc = Scanner(src, options)
        self.debug = debug
        self.syntax: List[SyntaxRule] = []
        self.comments: List[Comment] = []

    # ---- backtracking ----

    def _mark(self) -> _Mark:
        return self.sc.position, len(self.comments)

    def _reset(self, mark: _Mark) -> None:
        pos, n_comments = mark
        self.sc.return_to(pos)
        del self.comments[n_comments:]

    def _err(self, cls, message: str, start: Position, **kw) -> EBNFSyntaxError:
        return cls(message, start, self.sc.position, **kw)

    def _match_symbol(self, symbols: Tuple[bytes, ...]) -> Optional[bytes]:
        sc = self.sc
        for symbol in symbols:
            if sc.startswith(symbol):
                for _ in symbol:
                    sc.step()
                return symbol
        return None

    # ---- whitespace / comments ----

    def _collect_ws_and_comments(self) -> bool:
        """Skip whitespace and comments. True if anything was consumed."""
        sc = self.sc
        entry = sc.offset
        while not sc.complete():
            while sc.current in _WHITESPACE:
                sc.advance()
            if not self._bracketed_comment():
                break
        return sc.offset != entry

    def _open_comment(self, start: Position) -> None:
        sc = self.sc
        if sc.step().peek == _RPAREN:
            raise self._err(InvalidEmptyComment, 'Invalid sequence of characters: "(*)"', start)
        sc.step()

    def _bracketed_comment(self) -> bool:
        sc = self.sc
        if sc.current != _LPAREN or sc.peek != _STAR:
            return False
        start = sc.position
        self._open_comment(start)
        depth = 1
        while depth and not sc.complete():
            if sc.current == _STAR and sc.peek == _RPAREN:
                sc.step().step()
                depth -= 1
            elif sc.current == _LPAREN and sc.peek == _STAR:
                self._open_comment(sc.position)
                depth += 1
            else:
                sc.advance()
        if depth:
            raise self._err(UnterminatedComment, "Incomplete comment", start)
        value = _text(_trim(sc.slice(start.offset + 2, sc.offset - 2)))
        self.comments.append(Comment(value=value, position=start))
        return True

    # ---- lexical ----

    def _meta_identifier(self) -> Optional[MetaIdentifier]:
        sc = self.sc
        mark = self._mark()
        self._collect_ws_and_comments()
        start = sc.position
        if not _is_letter(sc.current):
            self._reset(mark)
            return None
        fragments: List[bytes] = []
        end = start.offset
        # the first pass re-checks the first character
        while True:
            fragment = sc.match(_WORD_RE)
            if fragment is None:
                break
            fragments.append(fragment)
            end = sc.offset
            self._collect_ws_and_comments()
        if not fragments:
            self._reset(mark)
            return None
        return MetaIdentifier(position=start, length=end - start.offset, value=b"".join(fragments))

    def _terminal_string(self) -> Optional[TerminalString]:
        sc = self.sc
        quote = sc.current
        if quote not in (_APOSTROPHE, _QUOTE):
            return None
        start = sc.position
        sc.step()
        if sc.current == quote:
            sc.step()
            raise self._err(EmptyTerminalString, "Empty terminal string", start)
        value = sc.match(_TERMINAL_RE[quote])
        if sc.current != quote:
            if sc.complete():
                raise self._err(UnterminatedTerminalString, "Unterminated terminal string", start)
            raise self._err(InvalidTerminalCharacter,
                            f"Invalid character 0x{sc.current:02x} in terminal string", start)
        sc.step()
        return TerminalString(position=start, length=sc.offset - start.offset, value=value)

    def _special_sequence(self) -> Optional[SpecialSequence]:
        sc = self.sc
        if sc.current != _QMARK:
            return None
        start = sc.position
        sc.step()
        while not sc.complete() and sc.current != _QMARK:
            sc.advance()
        if sc.complete():
            raise self._err(UnterminatedSpecialSequence, "Unterminated special sequence", start)
        sc.step()
        value = _text(_trim(sc.slice(start.offset + 1, sc.offset - 1)))
        return SpecialSequence(position=start, length=sc.offset - start.offset, value=value)

    # ---- structural ----

    def _bracketed_sequence(self, node_cls, opens: Tuple[bytes, ...], closes: Tuple[bytes, ...]):
        sc = self.sc
        start = sc.position
        opener = self._match_symbol(opens)
        if opener is None:
            return None
        value = self._definitions_list()
        if self._match_symbol(closes) is None:
            expected = " or ".join(repr(c.decode()) for c in closes)
            raise self._err(UnclosedBracket,
                            f"Unclosed {node_cls.kind.replace('_', ' ')} "
                            f"{opener.decode()!r}, expected {expected}", start)
        return node_cls(position=start, length=sc.offset - start.offset, value=tuple(value))

    def _optional_sequence(self) -> Optional[OptionalSequence]:
        return self._bracketed_sequence(OptionalSequence, _OPTION_OPEN, _OPTION_CLOSE)

    def _repeated_sequence(self) -> Optional[RepeatedSequence]:
        return self._bracketed_sequence(RepeatedSequence, _REPEAT_OPEN, _REPEAT_CLOSE)

    def _grouped_sequence(self) -> Optional[GroupedSequence]:
        return self._bracketed_sequence(GroupedSequence, _GROUP_OPEN, _GROUP_CLOSE)

    def _syntactic_primary(self) -> Optional[Primary]:
        """None stands for the empty sequence."""
        for production in (self._optional_sequence, self._repeated_sequence,
                           self._grouped_sequence, self._meta_identifier,
                           self._terminal_string, self._special_sequence):
            node = production()
            if node is not None:
                return node
        return None

    def _syntactic_factor(self) -> Optional[Factor]:
        sc = self.sc
        start = sc.position
        digits = sc.match(_DIGITS_RE)
        if digits is None:
            return self._syntactic_primary()
        count = int(digits)
        self._collect_ws_and_comments()
        if sc.current != _STAR:
            raise self._err(MissingRepetitionSymbol,
                            f"Expected '*' after repetition count {count}", start)
        sc.step()
        end = sc.offset
        self._collect_ws_and_comments()
        primary = self._syntactic_primary()
        if primary is not None:
            end = primary.end
        return SyntacticFactor(position=start, length=end - start.offset, count=count, value=primary)

    def _syntactic_term(self) -> Optional[Term]:
        sc = self.sc
        start = sc.position
        factor = self._syntactic_factor()
        if factor is None:
            return None
        self._collect_ws_and_comments()
        if sc.current != _MINUS:
            return factor
        sc.step()
        end = sc.offset
        self._collect_ws_and_comments()
        exception = self._syntactic_factor()
        if exception is not None:
            end = exception.end
        return SyntacticTerm(position=start, length=end - start.offset,
                             value=factor, exception=exception)

    def _single_definition(self) -> Optional[Definition]:
        sc = self.sc
        terms: List[Term] = []
        while True:
            term = self._syntactic_term()
            if term is not None:
                terms.append(term)
            self._collect_ws_and_comments()
            if sc.current != _COMMA:
                break
            sc.step()
            self._collect_ws_and_comments()
        if not terms:
            return None
        if len(terms) == 1:
            return terms[0]
        start = terms[0].position
        return SingleDefinition(position=start, length=terms[-1].end - start.offset, value=tuple(terms))

    def _at_definition_separator(self) -> bool:
        sc = self.sc
        if sc.current == _SLASH and sc.peek == _RPAREN:
            return False    # "/)" closes an optional sequence
        return sc.current in _DEFINITION_SEPARATORS

    def _definitions_list(self) -> List[Definition]:
        sc = self.sc
        definitions: List[Definition] = []
        self._collect_ws_and_comments()
        while True:
            definition = self._single_definition()
            if definition is not None:
                definitions.append(definition)
            self._collect_ws_and_comments()
            if not self._at_definition_separator():
                break
            sc.step()
            self._collect_ws_and_comments()
        return definitions

    def _syntax_rule(self) -> SyntaxRule:
        sc = self.sc
        self._collect_ws_and_comments()
        start = sc.position
        meta = self._meta_identifier()
        if meta is None:
            self._check_stray_token()
            raise self._err(MissingMetaIdentifier, "No meta-identifier found", start)
        name = meta.value.decode("ascii")
        if sc.current != _EQUALS:
            raise self._err(MissingDefinitionOperator,
                            f'No definition found for "{name}"', start, rule_name=name)
        sc.step()
        definitions = self._definitions_list()
        if sc.current != _SEMI:
            raise self._err(MissingTerminator,
                            f'No terminator for "{name}"', start, rule_name=name)
        sc.step()
        return SyntaxRule(position=start, length=sc.offset - start.offset,
                          name=name, value=tuple(definitions))

    def _check_stray_token(self) -> None:
        """A malformed quoted token where a rule name belongs is reported as itself."""
        mark = self._mark()
        if self.sc.current == _QMARK:
            self._special_sequence()
        elif self.sc.current in (_APOSTROPHE, _QUOTE):
            self._terminal_string()
        self._reset(mark)

    def parse(self) -> Grammar:
        sc = self.sc
        while not sc.complete():
            self._collect_ws_and_comments()
            if sc.complete():
                break
            rule = self._syntax_rule()
            self.syntax.append(rule)
            if self.debug:
                _eprint(f"[DEBUG] rule '{rule.name}' at {rule.position} | "
                        f"bytes={rule.length} definitions={len(rule.value)}")
        if self.debug:
            _eprint("[DEBUG] syntax ready | rules=%d comments=%d" %
                    (len(self.syntax), len(self.comments)))
        return Grammar(syntax=tuple(self.syntax), comments=tuple(self.comments))


def parse_ebnf(src: Source, options: Optional[ScanOptions] = None, debug: bool = False) -> Grammar:
    """
    Parse one EBNF document.
    - src    : bytes (or str, encoded as UTF-8)
    - options: scanner settings, e.g. ScanOptions(vertical_as_newline=True)
    - debug  : print per-rule progress to stderr
    """
    return _Parser(src, options, debug).parse()
