# block_parser.py
"""
Brace segmentation of a token stream into a tree of blocks.

Every `{` opens a child block whose owner is classified from the statement
that introduced it; the parent's token buffer is then trimmed back to its
last complete statement. Unbalanced input is tolerated: a stray `}` is
ignored and blocks still open at end of input are simply left open.
"""
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from lexer import KEYWORD, KEYWORDS, NEWLINE, OPERATOR, PUNCT, STRING, Token


@dataclass
class Owner:
    kind: str
    label: str
    meta: dict = field(default_factory=dict)


@dataclass
class Block:
    owner: Owner
    tokens: List[Token] = field(default_factory=list)
    children: List["Block"] = field(default_factory=list)
    start_line: int = 1
    end_line: int = 1
    # position in the parent's token buffer where this block was opened
    anchor: int = 0


def _closes_case_clause(tokens: List[Token], idx: int) -> bool:
    for tok in reversed(tokens[:idx]):
        if tok.kind == NEWLINE or (tok.kind == PUNCT and tok.value == ";"):
            return False
        if tok.kind == KEYWORD and tok.value in ("case", "default"):
            return True
    return False


def last_terminator(tokens: List[Token]) -> int:
    """
    Index of the token ending the last complete statement, or -1.

    Terminators outside parentheses: `;`, the `:` of a case clause, and a
    newline with statement text after it (trailing newlines don't count).
    """
    depth = 0
    seen_text = False
    for idx in range(len(tokens) - 1, -1, -1):
        tok = tokens[idx]
        if tok.kind == NEWLINE:
            if depth == 0 and seen_text:
                return idx
            continue
        if tok.kind == PUNCT and tok.value == ")":
            depth += 1
        elif tok.kind == PUNCT and tok.value == "(":
            depth = max(depth - 1, 0)
        elif depth == 0 and tok.kind == PUNCT and tok.value == ";":
            return idx
        elif depth == 0 and tok.kind == OPERATOR and tok.value == ":" and _closes_case_clause(tokens, idx):
            return idx
        seen_text = True
    return -1


def last_statement(tokens: List[Token]) -> List[Token]:
    return tokens[last_terminator(tokens) + 1:]


def trim_to_last_statement(tokens: List[Token]) -> None:
    del tokens[last_terminator(tokens) + 1:]


def flatten(tokens: List[Token], strings: bool = True) -> str:
    """Space-joined statement text; with strings=False every literal reads as ''."""
    return " ".join(t.text() if strings or t.kind != STRING else "''" for t in tokens if t.kind != NEWLINE)


def between_parens(tokens: List[Token], keyword: str, limit: int = 60) -> str:
    """Text of the first parenthesised group following `keyword`."""
    found = False
    depth = 0
    parts = []
    for tok in tokens:
        if not found:
            found = tok.kind == KEYWORD and tok.value == keyword
            continue
        if tok.kind == PUNCT and tok.value == "(":
            depth += 1
            if depth == 1:
                continue
        if tok.kind == PUNCT and tok.value == ")":
            depth -= 1
            if depth == 0:
                break
        if depth > 0 and tok.kind != NEWLINE:
            parts.append(tok.text())
    return " ".join(parts)[:limit]


# ---------- owner classification table ----------

OwnerRule = Callable[[str, List[Token]], Optional[Owner]]

EVENT_RE = re.compile(r"(\w+)\s*\.\s*(on|once|addEventListener)\s*\(\s*'([\w:.-]+)'")
ITERATOR_RE = re.compile(r"(\w+)\s*\.\s*(forEach|map|filter|reduce|find|some|every)\s*\(")


def _event(flat, stmt):
    # the event name is the only rule input taken from inside a string
    m = EVENT_RE.search(flatten(stmt))
    if m:
        obj, method, event = m.groups()
        return Owner("on-event", f"{obj}.{method}('{event}')", {"obj": obj, "event": event})
    return None


def _if(flat, stmt):
    if not re.search(r"\bif\b", flat):
        return None
    cond = between_parens(stmt, "if")
    kind = "else-if" if re.search(r"\belse\s+if\b", flat) else "if"
    return Owner(kind, cond or "condition", {"condition": cond})


def _else(flat, stmt):
    if flat.strip() == "else":
        return Owner("else", "else")
    return None


def _for_of(flat, stmt):
    if re.search(r"\bfor\b", flat) and re.search(r"\bof\b", flat):
        m = re.search(r"for\s*\([^)]*\bof\b\s*(\w+)", flat)
        return Owner("for-of", f"For each in {m.group(1)}" if m else "for...of")
    return None


def _for_in(flat, stmt):
    if re.search(r"\bfor\b", flat) and re.search(r"\bin\b", flat):
        return Owner("for-in", "for...in loop")
    return None


def _for(flat, stmt):
    if re.search(r"\bfor\b", flat):
        cond = between_parens(stmt, "for")
        return Owner("for", f"For: {cond[:40]}" if cond else "for loop")
    return None


def _while(flat, stmt):
    if re.search(r"\bwhile\b", flat) and not re.search(r"\bdo\b", flat):
        cond = between_parens(stmt, "while")
        return Owner("while", f"While: {cond[:40]}" if cond else "while loop")
    return None


def _do_while(flat, stmt):
    if re.search(r"\bdo\b", flat) and not re.search(r"\bwhile\b", flat):
        return Owner("do-while", "do...while")
    return None


def _switch(flat, stmt):
    if re.search(r"\bswitch\b", flat):
        expr = between_parens(stmt, "switch")
        return Owner("switch", f"Switch on {expr or 'value'}", {"expr": expr})
    return None


# `.catch(` / `.finally(` belong to promises, not to try statements
CATCH_RE = re.compile(r"(?:^|[^.\s])\s*\bcatch\b")
FINALLY_RE = re.compile(r"(?:^|[^.\s])\s*\bfinally\b")


def _try(flat, stmt):
    if re.search(r"\btry\b", flat) and not CATCH_RE.search(flat) and not FINALLY_RE.search(flat):
        return Owner("try", "try")
    return None


def _catch(flat, stmt):
    if CATCH_RE.search(flat):
        m = re.search(r"\bcatch\s*\(\s*(\w+)", flat)
        param = m.group(1) if m else "e"
        return Owner("catch", f"catch ({param})", {"param": param})
    return None


def _finally(flat, stmt):
    if FINALLY_RE.search(flat):
        return Owner("finally", "finally")
    return None


def _promise(method, kind, label):
    pattern = re.compile(r"\.\s*" + method + r"\s*\(")

    def rule(flat, stmt):
        if pattern.search(flat):
            return Owner(kind, label)
        return None
    return rule


def _iterator(flat, stmt):
    m = ITERATOR_RE.search(flat)
    if m:
        return Owner("iterator", f"{m.group(1)}.{m.group(2)}()", {"obj": m.group(1), "method": m.group(2)})
    return None


def _function(flat, stmt):
    m = re.search(r"\bfunction\s+(\w+)\s*\(", flat)
    if m:
        return Owner("function", f"function {m.group(1)}()", {"name": m.group(1)})
    return None


def _method(flat, stmt):
    # `setTimeout(function () {` is a callback, not a method
    if "=>" in flat or re.search(r"\bfunction\b", flat):
        return None
    m = re.match(r"^\s*(?:(?:async|static|get|set|public|private|protected)\s+)*(\w+)\s*\(.*\)\s*$", flat)
    if m and m.group(1) not in KEYWORDS:
        return Owner("method", f"{m.group(1)}()", {"name": m.group(1)})
    return None


def _named_arrow(flat, stmt):
    m = re.search(r"\b(?:const|let|var)\s+(\w+)\s*=.*=>", flat)
    if m:
        return Owner("arrow", f"{m.group(1)} = () =>", {"name": m.group(1)})
    return None


def _class(flat, stmt):
    m = re.search(r"\bclass\s+(\w+)", flat)
    if m:
        return Owner("class", f"class {m.group(1)}", {"name": m.group(1)})
    return None


def _callback(flat, stmt):
    if "=>" in flat or re.search(r"\bfunction\b", flat):
        return Owner("arrow", "callback")
    return None


OWNER_RULES: List[OwnerRule] = [
    _event,
    _if,
    _else,
    _for_of,
    _for_in,
    _for,
    _while,
    _do_while,
    _switch,
    _try,
    _catch,
    _finally,
    _promise("then", "then", "Promise resolved"),
    _promise("catch", "promise-catch", "Promise rejected"),
    _promise("finally", "promise-finally", "Promise finally"),
    _iterator,
    _function,
    _method,
    _named_arrow,
    _class,
    _callback,
]


def classify_owner(prior_tokens: List[Token]) -> Owner:
    """Classify the construct that owns a block from the tokens preceding its `{`."""
    stmt = last_statement(prior_tokens)
    flat = flatten(stmt, strings=False)
    for rule in OWNER_RULES:
        owner = rule(flat, stmt)
        if owner is not None:
            return owner
    return Owner("object", "block")


def parse_blocks(tokens: List[Token]) -> Block:
    root = Block(Owner("root", "root"))
    stack = [root]

    for tok in tokens:
        current = stack[-1]
        if tok.kind == PUNCT and tok.value == "{":
            child = Block(classify_owner(current.tokens), start_line=tok.line, end_line=tok.line)
            trim_to_last_statement(current.tokens)
            child.anchor = len(current.tokens)
            current.children.append(child)
            stack.append(child)
        elif tok.kind == PUNCT and tok.value == "}":
            # a stray close never pops the root
            if len(stack) > 1:
                stack.pop().end_line = tok.line
        else:
            current.tokens.append(tok)

    if tokens:
        root.end_line = tokens[-1].line
    return root
