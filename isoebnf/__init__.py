# isoebnf/__init__.py
"""ISO/IEC 14977 EBNF reader.

This package provides:
- a byte scanner with line/column bookkeeping and snapshot/restore
- AST nodes for every construct of the ISO EBNF meta-grammar
- a recursive-descent parser producing syntax rules plus extracted comments

    >>> g = parse_ebnf(b'digit = "0" | "1" ; (* binary *)')
    >>> g.syntax[0].name, g.comments[0].value
    ('digit', 'binary')
"""

from .scan import Position, ScanOptions, Scanner
from .grammar import (
    Kind, Node, TerminalString, MetaIdentifier, SpecialSequence, SyntaxRule,
    SingleDefinition, SyntacticTerm, SyntacticFactor, OptionalSequence,
    RepeatedSequence, GroupedSequence, Comment, Grammar, walk,
    EBNFSyntaxError, UnterminatedSpecialSequence, InvalidEmptyComment,
    UnterminatedComment, UnclosedBracket, MissingRepetitionSymbol,
    UnterminatedTerminalString, InvalidTerminalCharacter, EmptyTerminalString,
    RuleError, MissingMetaIdentifier, MissingDefinitionOperator, MissingTerminator,
    parse_ebnf,
)
