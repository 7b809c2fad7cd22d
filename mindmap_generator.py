# mindmap_generator.py
"""CFG -> Mermaid mindmap. Nesting is carried by indentation alone."""
import re
from typing import List

from cfg_nodes import (CFGNode, Decision, Event, Function, Loop, PromiseContinuation,
                       Sequential, Switch, TryCatch)

HEADER = "mindmap"
INDENT = "  "
MAX_TEXT_LEN = 48

# only words, spaces and `.,-` survive; anything else can be read as a shape or icon
UNSAFE_CHARS = re.compile(r"[^\w\s.,\-]")


def mindmap_text(text: str) -> str:
    text = UNSAFE_CHARS.sub(" ", text or "")
    return " ".join(text.split())[:MAX_TEXT_LEN].rstrip()


class MindmapBuilder:
    def __init__(self):
        self.lines = []

    def build(self, nodes: List[CFGNode], title: str = "Code structure") -> str:
        root = mindmap_text(title) or "Code structure"
        self.lines = [HEADER, f'{INDENT}root(("{root}"))']
        self._walk(nodes or [], 2)
        return "\n".join(self.lines)

    def _add(self, text: str, depth: int):
        text = mindmap_text(text)
        if text:
            self.lines.append(INDENT * depth + text)

    def _walk(self, nodes: List[CFGNode], depth: int):
        for node in nodes:
            if isinstance(node, Sequential):
                self._add(node.label, depth)
            elif isinstance(node, Function):
                self._add(f"Function {node.label}", depth)
                self._walk(node.body, depth + 1)
            elif isinstance(node, Decision):
                self._add(f"If {node.condition}", depth)
                if node.yes_branch:
                    self._add("Yes", depth + 1)
                    self._walk(node.yes_branch, depth + 2)
                if node.no_branch:
                    self._add("No", depth + 1)
                    self._walk(node.no_branch, depth + 2)
            elif isinstance(node, Loop):
                self._add(f"Loop {node.label}", depth)
                self._walk(node.body, depth + 1)
            elif isinstance(node, TryCatch):
                self._add("Try", depth)
                self._walk(node.try_body, depth + 1)
                self._add(f"Catch {node.catch_param}", depth)
                self._walk(node.catch_body, depth + 1)
                if node.finally_body:
                    self._add("Finally", depth)
                    self._walk(node.finally_body, depth + 1)
            elif isinstance(node, Switch):
                self._add(node.label, depth)
                for case in node.cases:
                    self._add(f"Case {case.case_label}", depth + 1)
                    self._walk(case.body, depth + 2)
            elif isinstance(node, Event):
                self._add(f"On {node.event_name} of {node.subject}", depth)
                self._walk(node.body, depth + 1)
            elif isinstance(node, PromiseContinuation):
                self._add(node.label, depth)
                self._walk(node.body, depth + 1)


def render_mindmap(nodes: List[CFGNode], title: str = "Code structure") -> str:
    return MindmapBuilder().build(nodes, title)
