import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lexer import (IDENT, KEYWORD, NEWLINE, NUMBER, OPERATOR, PLACEHOLDER, PUNCT, STRING,
                   tokenize)


def kinds_and_values(code):
    return [(t.kind, t.value) for t in tokenize(code) if t.kind != NEWLINE]


def test_simple_statement():
    assert kinds_and_values("const x = 42;") == [
        (KEYWORD, "const"),
        (IDENT, "x"),
        (OPERATOR, "="),
        (NUMBER, "42"),
        (PUNCT, ";"),
    ]


def test_comments_dropped_and_lines_counted():
    tokens = tokenize("a // note\n/* multi\n line */ b")
    values = [(t.value, t.line) for t in tokens if t.kind != NEWLINE]
    assert values == [("a", 1), ("b", 3)]


def test_multi_char_operators_are_greedy():
    ops = [v for k, v in kinds_and_values("a === b; f = (x) => x?.y; c **= 2") if k == OPERATOR]
    assert ops == ["===", "=", "=>", "?.", "**="]


def test_string_escape_keeps_next_char():
    tokens = tokenize("'it\\'s'")
    assert [(t.kind, t.value) for t in tokens] == [(STRING, "it's")]
    assert tokens[0].text() == "'it's'"


def test_template_interpolation_becomes_placeholder():
    tokens = tokenize("`total: ${a + {b: 1}.b} items`")
    assert len(tokens) == 1
    assert tokens[0].value == f"total: {PLACEHOLDER} items"


def test_unterminated_input_does_not_raise():
    assert kinds_and_values("'abc") == [(STRING, "abc")]
    assert kinds_and_values("x /* never closed") == [(IDENT, "x")]


def test_unknown_characters_skipped():
    assert kinds_and_values("a # b") == [(IDENT, "a"), (IDENT, "b")]


def test_hex_number_and_dollar_identifier():
    assert kinds_and_values("$el = 0x1F") == [(IDENT, "$el"), (OPERATOR, "="), (NUMBER, "0x1F")]
