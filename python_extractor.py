# python_extractor.py
"""
Shallow, line-oriented extractor for indentation-scoped sources.

Conditions, loops and try blocks are recorded in encounter order with empty
bodies; only plain statements carry labels. Good enough for a first sketch of
a script without parsing it.
"""
import re
from typing import List

from cfg_nodes import CFGNode, Decision, Loop, Sequential, TryCatch
from patterns import StatementPattern, match_statement, skip

PY_LABEL_LIMIT = 48

PY_PATTERNS = [
    skip(r"^\s*import\s+|^\s*from\s+[\w.]+\s+import"),
    StatementPattern(r"open\s*\(\s*['\"]([^'\"]+)['\"],\s*['\"]([wrbax+]+)['\"]", "io",
                     lambda m: f"Open file: {m.group(1)} ({m.group(2)})"),
    StatementPattern(r"\bprint\s*\(\s*f?['\"]([^'\"]{1,50})", "output", lambda m: f"Print: {m.group(1)[:40]}"),
    StatementPattern(r"\bprint\s*\((.{0,40})\)", "output",
                     lambda m: "Print: " + re.sub(r"['\"]", "", m.group(1)).strip()[:35]),
    StatementPattern(r"\binput\s*\(\s*['\"]([^'\"]{0,40})['\"]", "io", lambda m: f"Input: {m.group(1)}"),
    StatementPattern(r"\braise\s+(\w*(?:Error|Exception))", "throw", lambda m: f"Raise {m.group(1)}"),
    StatementPattern(r"requests\.(get|post|put|delete)\s*\(\s*['\"]([^'\"]{0,40})['\"]", "io",
                     lambda m: f"{m.group(1).upper()} {m.group(2)[:30]}"),
    StatementPattern(r"\breturn\s+(.{1,40})", "return", lambda m: f"Return {m.group(1).strip()[:30]}"),
]

IF_RE = re.compile(r"^(?:el)?if\s+(.{1,60}):")
FOR_RE = re.compile(r"^(?:async\s+)?for\s+(\w+)\s+in\s+(.{1,40}):")
WHILE_RE = re.compile(r"^while\s+(.{1,40}):")
TRY_RE = re.compile(r"^try\s*:")


def analyze_python(code: str) -> List[CFGNode]:
    nodes: List[CFGNode] = []
    last_label = None
    for line in code.split("\n"):
        text = line.strip()
        if not text or text.startswith("#"):
            continue

        m = IF_RE.match(text)
        if m:
            nodes.append(Decision(m.group(1)[:50]))
            continue
        m = FOR_RE.match(text)
        if m:
            nodes.append(Loop(f"For {m.group(1)} in {m.group(2)[:30]}", "for-in"))
            continue
        m = WHILE_RE.match(text)
        if m:
            nodes.append(Loop(f"While: {m.group(1)[:40]}", "while"))
            continue
        if TRY_RE.match(text):
            nodes.append(TryCatch())
            continue

        node = match_statement(text, PY_PATTERNS, max_len=PY_LABEL_LIMIT)
        # repeated consecutive steps (e.g. several prints of the same text) collapse
        if node and node.label != last_label:
            nodes.append(node)
            last_label = node.label
    return nodes


def python_has_structure(nodes: List[CFGNode]) -> bool:
    """A lone try block is not enough structure to draw."""
    return any(isinstance(n, (Sequential, Decision, Loop)) for n in nodes)
