# cfg_builder.py
import re
from typing import List, Tuple

from block_parser import Block, parse_blocks
from cfg_nodes import (CFGNode, Decision, Event, Function, Loop, PromiseContinuation,
                       Switch, SwitchCase, TryCatch, is_terminal)
from lexer import KEYWORD, NEWLINE, OPERATOR, PUNCT, Token, tokenize
from patterns import StatementPattern, match_statement, skip

LOOP_KINDS = ("for", "for-of", "for-in", "while", "do-while", "iterator")
PROMISE_KINDS = ("then", "promise-catch", "promise-finally")


def _return_label(m):
    value = m.group(1).rstrip(";").strip()[:30]
    return f"Return: {value}" if value else "Return"


# Matched against the compact statement text (tokens joined without spaces,
# strings re-quoted with single quotes).
JS_STATEMENT_PATTERNS = [
    skip(r"^(const|let|var)\w*=require\("),
    skip(r"^import.+from'"),
    skip(r"^'use strict'"),
    skip(r"^(break|continue);?$"),
    StatementPattern(r"createReadStream\('([^']+)'\)", "io", lambda m: f"Create read stream: {m.group(1)}"),
    StatementPattern(r"createWriteStream\('([^']+)'\)", "io", lambda m: f"Create write stream: {m.group(1)}"),
    StatementPattern(r"(\w+)\.pipe\((\w+)\)", "process", lambda m: f"Pipe {m.group(1)} to {m.group(2)}"),
    StatementPattern(r"pipeline\(", "process", lambda m: "Stream pipeline"),
    StatementPattern(r"fs\.(readFile|readFileSync)\('([^']+)'", "io", lambda m: f"Read file: {m.group(2)}"),
    StatementPattern(r"fs\.(writeFile|writeFileSync|appendFile)\('([^']+)'", "io",
                     lambda m: f"Write file: {m.group(2)}"),
    StatementPattern(r"fs\.(open|close|mkdir|unlink|rename|stat)\(", "io", lambda m: f"fs.{m.group(1)}"),
    StatementPattern(r"console\.\w+\('([^']{1,60})'\)", "output", lambda m: f"Log: {m.group(1)[:45]}"),
    StatementPattern(r"console\.\w+\((.{1,50})\)", "output",
                     lambda m: "Log: " + re.sub(r"['\"]", "", m.group(1))[:40]),
    StatementPattern(r"res\.(send|json|render)\(", "output", lambda m: f"Send response ({m.group(1)})"),
    StatementPattern(r"\.listen\((\w+)", "io", lambda m: f"Listen on port {m.group(1)}"),
    StatementPattern(r"fetch\('([^']{1,50})'", "io",
                     lambda m: "Fetch " + re.sub(r"^https?://", "", m.group(1))[:35]),
    StatementPattern(r"axios\.(get|post|put|delete|patch)\('([^']{1,40})'", "io",
                     lambda m: f"{m.group(1).upper()} {m.group(2)[:30]}"),
    StatementPattern(r"\.(find|findOne|findById)\(", "io", lambda m: f"DB query: {m.group(1)}"),
    StatementPattern(r"\.(save|create|insertOne?)\(", "io", lambda m: "DB insert"),
    StatementPattern(r"\.(update|updateOne|updateMany)\(", "io", lambda m: "DB update"),
    StatementPattern(r"\.(delete|deleteOne|deleteMany)\(", "io", lambda m: "DB delete"),
    StatementPattern(r"await(\w+(?:\.\w+)*)\(", "process", lambda m: f"Await {m.group(1)}"),
    StatementPattern(r"Promise\.(all|race|allSettled)\(", "process", lambda m: f"Promise.{m.group(1)}"),
    StatementPattern(r"^thrownew(\w*(?:Error|Exception))\(", "throw", lambda m: f"Throw {m.group(1)}"),
    StatementPattern(r"^thrownew(\w+)", "throw", lambda m: f"Throw {m.group(1)}"),
    StatementPattern(r"^throw(\w+)", "throw", lambda m: f"Throw {m.group(1)}"),
    StatementPattern(r"^returnres\.", "return", lambda m: "Return response"),
    StatementPattern(r"^return(.{0,35})", "return", _return_label),
    StatementPattern(r"^(?:const|let|var)(\w+)=new(\w+)\(", "process",
                     lambda m: f"Create {m.group(2)} → {m.group(1)}"),
]

# `x.on('evt', function () ...` registrations are handled as blocks
INLINE_HANDLER_RE = re.compile(r"\.\w*on\w*\('")
HANDLER_BODY_RE = re.compile(r"function|=>")


def split_statements(tokens: List[Token]) -> List[List[Token]]:
    """Split on `;` or newline outside parentheses, dropping blank statements."""
    statements = []
    current: List[Token] = []
    depth = 0
    for tok in tokens:
        current.append(tok)
        if tok.kind == PUNCT and tok.value == "(":
            depth += 1
        elif tok.kind == PUNCT and tok.value == ")":
            depth = max(depth - 1, 0)
        if depth:
            continue
        if tok.kind == PUNCT and tok.value == ";":
            statements.append(current)
            current = []
        elif tok.kind == NEWLINE and any(t.kind != NEWLINE for t in current):
            statements.append(current)
            current = []
    if any(t.kind != NEWLINE for t in current):
        statements.append(current)
    return statements


def compact(tokens: List[Token]) -> str:
    return "".join(t.text() for t in tokens if t.kind != NEWLINE)


def extract_statement_nodes(tokens: List[Token]) -> List[CFGNode]:
    """Sequential nodes for a block's own statements; repeated labels kept once."""
    nodes = []
    seen = set()
    for stmt in split_statements(tokens):
        text = compact(stmt)
        if not text:
            continue
        if INLINE_HANDLER_RE.search(text) and HANDLER_BODY_RE.search(text):
            continue
        node = match_statement(text, JS_STATEMENT_PATTERNS)
        if node and node.label not in seen:
            seen.add(node.label)
            nodes.append(node)
    return nodes


class CFGBuilder:
    """Folds a block tree into CFG nodes, one level of nesting per call."""

    def build(self, block: Block) -> List[CFGNode]:
        statements = extract_statement_nodes(block.tokens) if block.tokens else []
        return self._assemble(statements, block.children)

    def _assemble(self, statements, children) -> List[CFGNode]:
        # plain statements first, nested structure next, return/throw last
        early = [n for n in statements if not is_terminal(n)]
        trailing = [n for n in statements if is_terminal(n)]
        return early + self._fold_children(children) + trailing

    def _fold_children(self, children: List[Block]) -> List[CFGNode]:
        nodes: List[CFGNode] = []
        i = 0
        while i < len(children):
            child = children[i]
            kind = child.owner.kind

            if kind in ("if", "else-if"):
                node, i = self._if_chain(children, i)
                nodes.append(node)
                continue
            if kind == "try":
                node, i = self._try(children, i)
                nodes.append(node)
                continue

            if kind in ("else", "catch", "finally"):
                pass  # orphaned continuation clause
            elif kind in LOOP_KINDS:
                nodes.append(Loop(child.owner.label, kind, self.build(child)))
            elif kind == "switch":
                nodes.append(Switch(child.owner.label, self._switch_cases(child)))
            elif kind == "on-event":
                meta = child.owner.meta
                nodes.append(Event(meta["obj"], meta["event"], child.owner.label, self.build(child)))
            elif kind in PROMISE_KINDS:
                nodes.append(PromiseContinuation(child.owner.label, self.build(child)))
            elif kind in ("function", "method"):
                nodes.append(Function(child.owner.label, self.build(child)))
            else:
                nodes.extend(self.build(child))
            i += 1
        return nodes

    def _if_chain(self, children: List[Block], i: int) -> Tuple[Decision, int]:
        head = Decision(children[i].owner.label, self.build(children[i]))
        tip = head
        j = i + 1
        while j < len(children):
            nxt = children[j]
            if nxt.owner.kind == "else-if":
                branch = Decision(nxt.owner.label, self.build(nxt))
                tip.no_branch = [branch]
                tip = branch
                j += 1
            elif nxt.owner.kind == "else":
                tip.no_branch = self.build(nxt)
                j += 1
                break
            else:
                break
        return head, j

    def _try(self, children: List[Block], i: int) -> Tuple[TryCatch, int]:
        node = TryCatch(self.build(children[i]))
        j = i + 1
        if j < len(children) and children[j].owner.kind == "catch":
            node.catch_param = children[j].owner.meta.get("param", "e")
            node.catch_body = self.build(children[j])
            j += 1
        if j < len(children) and children[j].owner.kind == "finally":
            node.finally_body = self.build(children[j])
            j += 1
        return node, j

    def _switch_cases(self, block: Block) -> List[SwitchCase]:
        tokens = block.tokens
        clauses = []  # (label, first token index, body tokens)
        i = 0
        while i < len(tokens):
            tok = tokens[i]
            if tok.kind == KEYWORD and tok.value in ("case", "default"):
                start = i
                parts = ["default"] if tok.value == "default" else []
                i += 1
                while i < len(tokens) and not (tokens[i].kind == OPERATOR and tokens[i].value == ":"):
                    if tokens[i].kind != NEWLINE:
                        parts.append(tokens[i].text())
                    i += 1
                clauses.append((" ".join(parts), start, []))
                i += 1
                continue
            if clauses:
                clauses[-1][2].append(tok)
            i += 1

        cases = []
        for idx, (label, start, body_tokens) in enumerate(clauses):
            end = clauses[idx + 1][1] if idx + 1 < len(clauses) else len(tokens) + 1
            nested = [c for c in block.children if start <= c.anchor < end]
            statements = extract_statement_nodes(body_tokens)
            cases.append(SwitchCase(label, self._assemble(statements, nested)))
        return cases


def build_cfg(block: Block) -> List[CFGNode]:
    return CFGBuilder().build(block)


def build_cfg_from_source(code: str) -> List[CFGNode]:
    """Lexer, block segmenter and CFG builder in one call."""
    return build_cfg(parse_blocks(tokenize(code)))
