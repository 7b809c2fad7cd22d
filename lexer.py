# lexer.py
from dataclasses import dataclass
from typing import List

IDENT = "identifier"
KEYWORD = "keyword"
NUMBER = "number"
STRING = "string"
PUNCT = "punctuation"
OPERATOR = "operator"
NEWLINE = "newline"

KEYWORDS = frozenset([
    "if", "else", "for", "while", "do", "switch", "case", "default",
    "try", "catch", "finally", "throw", "return", "break", "continue",
    "const", "let", "var", "function", "class", "new", "delete",
    "typeof", "instanceof", "import", "export", "from", "as", "of", "in",
    "await", "async", "yield", "extends", "super", "this", "void", "static",
    "get", "set", "interface", "type", "enum", "declare", "abstract",
    "implements", "namespace", "module", "readonly", "override",
])

PUNCT_CHARS = frozenset("(){}[];,")

# order matters: longest operators first
MULTI_CHAR_OPERATORS = (
    "===", "!==", "**=", "||=", "&&=", "??=",
    "**", "??", "?.", "==", "!=", "<=", ">=", "=>", "||", "&&",
    "++", "--", "+=", "-=", "*=", "/=", "%=",
)
SINGLE_CHAR_OPERATORS = frozenset(".:<>=+-*/%!~^&|@?")

NUMBER_CHARS = frozenset("0123456789._eExXabcdfABCDFoObBnN")
IDENT_START = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_$")
IDENT_CHARS = IDENT_START | frozenset("0123456789")

PLACEHOLDER = "…"


@dataclass
class Token:
    kind: str
    value: str
    line: int

    def text(self) -> str:
        """Value as it reads in a flattened statement (strings re-quoted)."""
        if self.kind == STRING:
            return f"'{self.value}'"
        return self.value


def tokenize(code: str) -> List[Token]:
    """Turn raw source text into a flat token list. Never fails."""
    tokens: List[Token] = []
    i = 0
    line = 1
    n = len(code)

    while i < n:
        ch = code[i]

        if ch == "\n":
            tokens.append(Token(NEWLINE, "\n", line))
            line += 1
            i += 1
            continue
        if ch in " \t\r":
            i += 1
            continue

        # comments
        if ch == "/" and code.startswith("//", i):
            while i < n and code[i] != "\n":
                i += 1
            continue
        if ch == "/" and code.startswith("/*", i):
            end = code.find("*/", i + 2)
            end = n if end == -1 else end + 2
            line += code.count("\n", i, end)
            i = end
            continue

        if ch == "`":
            i, line = _read_template(code, i + 1, line, tokens)
            continue
        if ch in "'\"":
            i, line = _read_string(code, i + 1, ch, line, tokens)
            continue

        if ch.isdigit():
            start = i
            while i < n and code[i] in NUMBER_CHARS:
                i += 1
            tokens.append(Token(NUMBER, code[start:i], line))
            continue

        if ch in IDENT_START:
            start = i
            while i < n and code[i] in IDENT_CHARS:
                i += 1
            word = code[start:i]
            tokens.append(Token(KEYWORD if word in KEYWORDS else IDENT, word, line))
            continue

        if ch in PUNCT_CHARS:
            tokens.append(Token(PUNCT, ch, line))
            i += 1
            continue

        op = next((o for o in MULTI_CHAR_OPERATORS if code.startswith(o, i)), None)
        if op:
            tokens.append(Token(OPERATOR, op, line))
            i += len(op)
            continue
        if ch in SINGLE_CHAR_OPERATORS:
            tokens.append(Token(OPERATOR, ch, line))
        i += 1

    return tokens


def _read_string(code, i, quote, line, tokens):
    start_line = line
    chars = []
    n = len(code)
    while i < n and code[i] != quote:
        if code[i] == "\\":
            if i + 1 < n:
                chars.append(code[i + 1])
            i += 2
            continue
        if code[i] == "\n":
            line += 1
        chars.append(code[i])
        i += 1
    tokens.append(Token(STRING, "".join(chars), start_line))
    return i + 1, line


def _read_template(code, i, line, tokens):
    """Back-tick string; every ${...} collapses to one placeholder."""
    start_line = line
    chars = []
    n = len(code)
    while i < n:
        ch = code[i]
        if ch == "\n":
            line += 1
        if ch == "\\":
            if i + 1 < n:
                chars.append(code[i + 1])
            i += 2
            continue
        if ch == "$" and code.startswith("${", i):
            chars.append(PLACEHOLDER)
            end = _skip_interpolation(code, i + 2)
            line += code.count("\n", i, end)
            i = end
            continue
        if ch == "`":
            i += 1
            break
        chars.append(ch)
        i += 1
    tokens.append(Token(STRING, "".join(chars), start_line))
    return i, line


def _skip_interpolation(code, i):
    depth = 1
    while i < len(code):
        if code[i] == "{":
            depth += 1
        elif code[i] == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return i
