# isoebnf/grammar/ast.py
"""Grammar AST
- one frozen dataclass per ISO 14977 construct, tagged by `kind`
- every node keeps its start `position` and byte `length`
- comments are collected beside the tree, never inside it
"""

from __future__     import annotations
from dataclasses    import dataclass, field
from typing         import ClassVar, Iterator, Optional, Tuple, Union
from ..scan         import Position


class Kind:
    TERMINAL_STRING   = "terminal_string"
    META_IDENTIFIER   = "meta_identifier"
    SPECIAL_SEQUENCE  = "special_sequence"
    SYNTAX_RULE       = "syntax_rule"
    SINGLE_DEFINITION = "single_definition"
    SYNTACTIC_TERM    = "syntactic_term"
    SYNTACTIC_FACTOR  = "syntactic_factor"
    OPTIONAL_SEQUENCE = "optional_sequence"
    REPEATED_SEQUENCE = "repeated_sequence"
    GROUPED_SEQUENCE  = "grouped_sequence"


@dataclass(frozen=True)
class Node:
    kind: ClassVar[str] = ""
    position: Position
    length: int

    @property
    def end(self) -> int:
        """Offset one past the last byte of the construct."""
        return self.position.offset + self.length

# ---- lexical ----

@dataclass(frozen=True)
class TerminalString(Node):
    kind: ClassVar[str] = Kind.TERMINAL_STRING
    value: bytes

@dataclass(frozen=True)
class MetaIdentifier(Node):
    kind: ClassVar[str] = Kind.META_IDENTIFIER
    value: bytes    # fragments joined, whitespace/comments removed

@dataclass(frozen=True)
class SpecialSequence(Node):
    kind: ClassVar[str] = Kind.SPECIAL_SEQUENCE
    value: str      # trimmed, left uninterpreted

# ---- structural ----

@dataclass(frozen=True)
class OptionalSequence(Node):
    kind: ClassVar[str] = Kind.OPTIONAL_SEQUENCE
    value: Tuple["Definition", ...] = ()

@dataclass(frozen=True)
class RepeatedSequence(Node):
    kind: ClassVar[str] = Kind.REPEATED_SEQUENCE
    value: Tuple["Definition", ...] = ()

@dataclass(frozen=True)
class GroupedSequence(Node):
    kind: ClassVar[str] = Kind.GROUPED_SEQUENCE
    value: Tuple["Definition", ...] = ()

@dataclass(frozen=True)
class SyntacticFactor(Node):
    """`count * primary`. value is None when the primary is the empty sequence."""
    kind: ClassVar[str] = Kind.SYNTACTIC_FACTOR
    count: int
    value: Optional["Primary"]

@dataclass(frozen=True)
class SyntacticTerm(Node):
    """`factor - exception`. exception may be None (empty sequence)."""
    kind: ClassVar[str] = Kind.SYNTACTIC_TERM
    value: "Factor"
    exception: Optional["Factor"] = None

@dataclass(frozen=True)
class SingleDefinition(Node):
    """
    Comma-separated concatenation of two or more terms.
    A definition with a single term is never wrapped; the term stands alone.
    """
    kind: ClassVar[str] = Kind.SINGLE_DEFINITION
    value: Tuple["Term", ...] = ()

@dataclass(frozen=True)
class SyntaxRule(Node):
    kind: ClassVar[str] = Kind.SYNTAX_RULE
    name: str
    value: Tuple["Definition", ...] = ()


Primary = Union[OptionalSequence, RepeatedSequence, GroupedSequence,
                MetaIdentifier, TerminalString, SpecialSequence]
Factor = Union[SyntacticFactor, Primary]
Term = Union[SyntacticTerm, Factor]
Definition = Union[SingleDefinition, Term]


@dataclass(frozen=True)
class Comment:
    value: str
    position: Position


@dataclass(frozen=True)
class Grammar:
    """Parse result. Rules and comments in source order; duplicate rule names are kept."""
    syntax: Tuple[SyntaxRule, ...] = field(default_factory=tuple)
    comments: Tuple[Comment, ...] = field(default_factory=tuple)

    def rule_names(self) -> Tuple[str, ...]:
        return tuple(r.name for r in self.syntax)


def walk(node: Optional[Node]) -> Iterator[Node]:
    """Depth-first pre-order walk over `node` and everything nested in it."""
    if node is None:
        return
    yield node
    if isinstance(node, SyntacticTerm):
        yield from walk(node.value)
        yield from walk(node.exception)
    elif isinstance(node, SyntacticFactor):
        yield from walk(node.value)
    elif isinstance(node, (SyntaxRule, SingleDefinition, OptionalSequence,
                           RepeatedSequence, GroupedSequence)):
        for child in node.value:
            yield from walk(child)
