# isoebnf/grammar/__init__.py
"""EBNF meta-grammar: AST nodes, fatal errors and the recursive-descent parser."""

from .ast import (
    Kind, Node, TerminalString, MetaIdentifier, SpecialSequence, SyntaxRule,
    SingleDefinition, SyntacticTerm, SyntacticFactor, OptionalSequence,
    RepeatedSequence, GroupedSequence, Comment, Grammar, walk,
)
from .errors import (
    EBNFSyntaxError, UnterminatedSpecialSequence, InvalidEmptyComment,
    UnterminatedComment, UnclosedBracket, MissingRepetitionSymbol,
    UnterminatedTerminalString, InvalidTerminalCharacter, EmptyTerminalString,
    RuleError, MissingMetaIdentifier, MissingDefinitionOperator, MissingTerminator,
)
from .parser import parse_ebnf
