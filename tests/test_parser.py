import pytest

from isoebnf import (
    Kind, Position, ScanOptions, SingleDefinition, SyntacticFactor, SyntacticTerm,
    parse_ebnf, walk,
)


def _rule_body(content):
    """Parse `a=<content>;` and return (definitions, comments)."""
    g = parse_ebnf(f"a={content};")
    rule = g.syntax[0]
    assert rule.name == "a"
    assert rule.kind == Kind.SYNTAX_RULE
    assert rule.length == 3 + len(content)
    return rule.value, g.comments


@pytest.mark.parametrize("content", ["", " ", "\t", "\n", "\r\n\r\r"])
def test_empty_sequence(content):
    value, _ = _rule_body(content)
    assert value == ()

@pytest.mark.parametrize("content, kind", [
    ("()", Kind.GROUPED_SEQUENCE),
    ("{}", Kind.REPEATED_SEQUENCE),
    ("(::)", Kind.REPEATED_SEQUENCE),
    ("[]", Kind.OPTIONAL_SEQUENCE),
    ("(//)", Kind.OPTIONAL_SEQUENCE),
])
def test_empty_bracketed_sequences(content, kind):
    value, _ = _rule_body(content)
    assert value[0].kind == kind
    assert value[0].value == ()

@pytest.mark.parametrize("content, kind", [
    ("(/ a / b /)", Kind.OPTIONAL_SEQUENCE),
    ("[ a / b ]", Kind.OPTIONAL_SEQUENCE),
    ("[ a / b /)", Kind.OPTIONAL_SEQUENCE),
    ("(/ a / b ]", Kind.OPTIONAL_SEQUENCE),
    ("(: a | b :)", Kind.REPEATED_SEQUENCE),
    ("{ a | b :)", Kind.REPEATED_SEQUENCE),
])
def test_digraph_and_ascii_brackets(content, kind):
    value, _ = _rule_body(content)
    assert value[0].kind == kind
    assert [d.value for d in value[0].value] == [b"a", b"b"]


def test_syntactic_factor_with_terminal():
    value, _ = _rule_body('2*"x"')
    factor = value[0]
    assert isinstance(factor, SyntacticFactor)
    assert factor.count == 2
    assert factor.value.kind == Kind.TERMINAL_STRING
    assert factor.value.value == b"x"

def test_syntactic_factor_with_group():
    value, _ = _rule_body("3 * ()")
    assert value[0].kind == Kind.SYNTACTIC_FACTOR
    assert value[0].count == 3
    assert value[0].value.kind == Kind.GROUPED_SEQUENCE

def test_syntactic_factor_count_is_exact():
    value, _ = _rule_body("0*x, 123456789012345678901234567890*y")
    assert [f.count for f in value[0].value] == [0, 123456789012345678901234567890]

def test_syntactic_factor_with_empty_primary():
    value, _ = _rule_body("3*")
    assert value[0].count == 3
    assert value[0].value is None
    assert value[0].length == 2


def test_terminal_falls_through_term():
    value, _ = _rule_body('"a"')
    assert value[0].kind == Kind.TERMINAL_STRING

@pytest.mark.parametrize("content", ['b-"a"', 'b   -   "a"   '])
def test_syntactic_term_with_exception(content):
    value, _ = _rule_body(content)
    term = value[0]
    assert isinstance(term, SyntacticTerm)
    assert term.value.kind == Kind.META_IDENTIFIER
    assert term.exception.kind == Kind.TERMINAL_STRING

def test_syntactic_term_with_grouped_exception():
    value, _ = _rule_body('b-("a")')
    assert value[0].exception.kind == Kind.GROUPED_SEQUENCE
    assert value[0].exception.value[0].kind == Kind.TERMINAL_STRING

def test_syntactic_term_with_empty_exception():
    value, _ = _rule_body("b -")
    assert value[0].kind == Kind.SYNTACTIC_TERM
    assert value[0].exception is None


@pytest.mark.parametrize("content, kinds", [
    ('"a" | b', [Kind.TERMINAL_STRING, Kind.META_IDENTIFIER]),
    ('b | "a"', [Kind.META_IDENTIFIER, Kind.TERMINAL_STRING]),
    ("x / y ! z", [Kind.META_IDENTIFIER] * 3),
    ("| b", [Kind.META_IDENTIFIER]),
    ("b |", [Kind.META_IDENTIFIER]),
])
def test_definitions_list(content, kinds):
    value, _ = _rule_body(content)
    assert [d.kind for d in value] == kinds

def test_definitions_inside_brackets():
    value, _ = _rule_body('("a"|b)')
    assert value[0].kind == Kind.GROUPED_SEQUENCE
    assert value[0].value[0].kind == Kind.TERMINAL_STRING
    value, _ = _rule_body("{a|b}")
    assert value[0].kind == Kind.REPEATED_SEQUENCE
    assert value[0].value[0].kind == Kind.META_IDENTIFIER

def test_single_definition_collects_terms():
    value, _ = _rule_body('a, "b", c')
    definition = value[0]
    assert isinstance(definition, SingleDefinition)
    assert [t.kind for t in definition.value] == [
        Kind.META_IDENTIFIER, Kind.TERMINAL_STRING, Kind.META_IDENTIFIER]
    assert definition.position == Position(2, 0, 2)
    assert definition.length == 9


@pytest.mark.parametrize("content, character, text", [
    ('"a" (* x *)', 6, "x"),
    ("(* xx *)", 2, "xx"),
    ("((* xxx *)a|b)", 3, "xxx"),
])
def test_comment_positions(content, character, text):
    _, comments = _rule_body(content)
    assert comments[0].position.character == character
    assert comments[0].value == text

def test_only_trivia_yields_no_rules():
    g = parse_ebnf(b"  (* a (* nested *) b *)\r\n\t(**)\n")
    assert g.syntax == ()
    assert [c.value for c in g.comments] == ["a (* nested *) b", ""]


def test_meta_identifier_fragments_are_joined():
    g = parse_ebnf("long name (* note *) 2 = x;")
    assert g.syntax[0].name == "longname2"
    assert [c.value for c in g.comments] == ["note"]

def test_meta_identifier_length_ends_at_last_fragment():
    value, _ = _rule_body("ab  cd   ")
    assert value[0].value == b"abcd"
    assert value[0].length == 6

def test_terminal_strings_keep_other_quote():
    value, _ = _rule_body("\"it's\" | 'say \"hi\"'")
    assert [t.value for t in value] == [b"it's", b'say "hi"']

def test_special_sequence_is_trimmed_text():
    value, _ = _rule_body("?  any\tcharacter \n?")
    assert value[0].kind == Kind.SPECIAL_SEQUENCE
    assert value[0].value == "any\tcharacter"


def test_multiple_syntax_rules():
    src = ('\n(* first *)\na b c = "a" | "b" (* second *)\n'
           '    | "c";\nb = ( a| "x") - (* third *);')
    g = parse_ebnf(src)
    first, second = g.syntax

    assert first.position == Position(13, 2, 0)
    assert first.value[0].position == Position(21, 2, 8)
    assert first.value[1].position == Position(27, 2, 14)
    assert first.value[2].position == Position(50, 3, 6)
    assert second.position == Position(55, 4, 0)
    term = second.value[0]
    assert term.position == Position(59, 4, 4)
    assert term.value.position == Position(59, 4, 4)
    assert term.value.value[0].position == Position(61, 4, 6)
    assert term.value.value[1].position == Position(64, 4, 9)

    assert g.rule_names() == ("abc", "b")
    assert [d.kind for d in first.value] == [Kind.TERMINAL_STRING] * 3
    assert term.kind == Kind.SYNTACTIC_TERM
    assert term.exception is None
    assert term.value.kind == Kind.GROUPED_SEQUENCE
    assert [d.kind for d in term.value.value] == [Kind.META_IDENTIFIER, Kind.TERMINAL_STRING]

    assert [c.value for c in g.comments] == ["first", "second", "third"]

def test_duplicate_rules_are_kept_in_order():
    g = parse_ebnf("a = x; b = y; a = z;")
    assert g.rule_names() == ("a", "b", "a")
    assert [r.value[0].value for r in g.syntax] == [b"x", b"y", b"z"]


def test_parses_are_independent():
    src = b"a = [b], {c} - 'd' (* e *); f = 2 * ?g?;"
    assert parse_ebnf(src) == parse_ebnf(src)
    assert parse_ebnf(src) == parse_ebnf(src.decode())
    assert parse_ebnf(bytearray(src)) == parse_ebnf(src)

def test_walk_visits_every_node():
    g = parse_ebnf("a = [b, 2 * c] - d | {(e)};")
    kinds = [n.kind for n in walk(g.syntax[0])]
    assert kinds == [
        Kind.SYNTAX_RULE,
        Kind.SYNTACTIC_TERM, Kind.OPTIONAL_SEQUENCE, Kind.SINGLE_DEFINITION,
        Kind.META_IDENTIFIER, Kind.SYNTACTIC_FACTOR, Kind.META_IDENTIFIER,
        Kind.META_IDENTIFIER,
        Kind.REPEATED_SEQUENCE, Kind.GROUPED_SEQUENCE, Kind.META_IDENTIFIER,
    ]

def test_vertical_tab_only_changes_lines():
    src = b"a = x;\x0bb = y;"
    plain = parse_ebnf(src)
    vertical = parse_ebnf(src, ScanOptions(vertical_as_newline=True))
    assert plain.syntax[1].position == Position(7, 0, 7)
    assert vertical.syntax[1].position == Position(7, 1, 0)
    assert [n.kind for r in plain.syntax for n in walk(r)] == \
           [n.kind for r in vertical.syntax for n in walk(r)]

def test_debug_reports_rules(capsys):
    parse_ebnf("a = x; (* c *)", debug=True)
    err = capsys.readouterr().err
    assert "[DEBUG] rule 'a' at 0:0" in err
    assert "rules=1 comments=1" in err
