# flowchart_generator.py
"""
CFG -> Mermaid flowchart text, plus networkx / graphviz views of the result.

The walk is a single recursive pass that threads an "open exit" list: the
(node id, edge label) pairs whose outgoing edge is not wired yet. Each node
consumes the current exits and hands back the ones it leaves dangling.
"""
import re
from typing import List, Tuple

import graphviz
import networkx as nx

from cfg_nodes import (CFGNode, Decision, Event, Function, Loop, PromiseContinuation,
                       Sequential, Switch, TryCatch, is_terminal)

HEADER = "flowchart TD"
START_ID = "S"
END_ID = "Z"
MAX_LABEL_WORDS = 10
MAX_LABEL_LEN = 48

Exit = Tuple[str, str]


def sanitize_label(text: str) -> str:
    """Make a label safe to put between double quotes in a Mermaid node."""
    text = re.sub(r"\[([^\]]+)\]", r"(\1)", text or "")
    text = re.sub(r"[\"\\`{}|;]", "", text)
    words = text.split()
    return " ".join(words[:MAX_LABEL_WORDS])[:MAX_LABEL_LEN].rstrip()


def node_line(node_id: str, kind: str, label: str) -> str:
    label = sanitize_label(label)
    if kind in ("io", "output"):
        return f'  {node_id}[/"{label}"/]'
    if kind == "terminator":
        return f'  {node_id}(["{label}"])'
    return f'  {node_id}["{label}"]'


def decision_line(node_id: str, label: str) -> str:
    return f'  {node_id}{{"{label}"}}'


def edge_line(src: str, dst: str, label: str = "") -> str:
    if label:
        return f"  {src} -->|{label}| {dst}"
    return f"  {src} --> {dst}"


def dedupe(lines: List[str]) -> List[str]:
    seen = set()
    result = []
    for line in lines:
        if line not in seen:
            seen.add(line)
            result.append(line)
    return result


class IdGenerator:
    """Node ids for one render: one counter shared by every prefix."""

    def __init__(self):
        self.counter = 0

    def next(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix}{self.counter}"


class FlowchartBuilder:
    def __init__(self):
        self.ids = IdGenerator()
        self.lines = []

    def build(self, nodes: List[CFGNode]) -> str:
        self.ids = IdGenerator()
        self.lines = [HEADER, node_line(START_ID, "terminator", "Start"), node_line(END_ID, "terminator", "End")]

        exits = self._walk(nodes or [], [(START_ID, "")])
        for node_id, label in exits:
            if node_id != END_ID:
                self.lines.append(edge_line(node_id, END_ID, label))
        return "\n".join(dedupe(self.lines))

    def _enter(self, exits: List[Exit], target: str):
        for node_id, label in exits:
            self.lines.append(edge_line(node_id, target, label))

    def _walk(self, nodes: List[CFGNode], exits: List[Exit]) -> List[Exit]:
        for node in nodes:
            if isinstance(node, Function):
                exits = self._walk(node.body, exits)

            elif isinstance(node, Sequential):
                node_id = self.ids.next("N")
                self.lines.append(node_line(node_id, node.kind, node.label))
                self._enter(exits, node_id)
                exits = [(node_id, "")]
                if is_terminal(node):
                    self.lines.append(edge_line(node_id, END_ID))
                    # anything after a return/throw in the same list stays unattached
                    exits = []

            elif isinstance(node, Decision):
                node_id = self.ids.next("D")
                self.lines.append(decision_line(node_id, sanitize_label(node.condition) + "?"))
                self._enter(exits, node_id)
                yes_exits = self._walk(node.yes_branch, [(node_id, "Yes")])
                no_exits = self._walk(node.no_branch, [(node_id, "No")])
                exits = yes_exits + no_exits

            elif isinstance(node, Loop):
                node_id = self.ids.next("L")
                self.lines.append(decision_line(node_id, sanitize_label(node.label) + "?"))
                self._enter(exits, node_id)
                # back-edges keep the label they arrive with
                for body_id, label in self._walk(node.body, [(node_id, "Yes")]):
                    self.lines.append(edge_line(body_id, node_id, label))
                exits = [(node_id, "No")]

            elif isinstance(node, TryCatch):
                try_id = self.ids.next("T")
                self.lines.append(node_line(try_id, "process", "Try block"))
                self._enter(exits, try_id)
                try_exits = self._walk(node.try_body, [(try_id, "")])
                catch_id = self.ids.next("C")
                self.lines.append(node_line(catch_id, "process", f"Catch: {sanitize_label(node.catch_param or 'error')}"))
                self.lines.append(edge_line(try_id, catch_id, "Error"))
                catch_exits = self._walk(node.catch_body, [(catch_id, "")])
                # finally_body is not drawn
                exits = try_exits + catch_exits

            elif isinstance(node, Switch):
                node_id = self.ids.next("SW")
                self.lines.append(decision_line(node_id, sanitize_label(node.label)))
                self._enter(exits, node_id)
                case_exits = []
                for case in node.cases:
                    case_label = sanitize_label(case.case_label)
                    body = [Sequential("process", f"Case: {case_label}")] + case.body
                    case_exits.extend(self._walk(body, [(node_id, case_label)]))
                exits = case_exits

            elif isinstance(node, Event):
                node_id = self.ids.next("H")
                label = f"{sanitize_label(node.subject)}.on('{sanitize_label(node.event_name)}')"
                self.lines.append(node_line(node_id, "process", label))
                self._enter(exits, node_id)
                for body_id, label in self._walk(node.body, [(node_id, "")]):
                    self.lines.append(edge_line(body_id, END_ID, label))
                exits = []

            elif isinstance(node, PromiseContinuation):
                continue

        return exits


def render_flowchart(nodes: List[CFGNode]) -> str:
    """Mermaid flowchart for a CFG. Each call gets its own builder and ids."""
    return FlowchartBuilder().build(nodes)


# ---------- graph views of rendered text ----------

NODE_PATTERNS = [
    (re.compile(r'^\s*(\w+)\(\["(.*)"\]\)$'), "terminator"),
    (re.compile(r'^\s*(\w+)\[/"(.*)"/\]$'), "io"),
    (re.compile(r'^\s*(\w+)\{"(.*)"\}$'), "decision"),
    (re.compile(r'^\s*(\w+)\["(.*)"\]$'), "process"),
]
EDGE_RE = re.compile(r"^\s*(\w+) -->(?:\|(.*)\|)? (\w+)$")


def flowchart_to_graph(text: str) -> nx.MultiDiGraph:
    """
    Parse flowchart text back into a graph. Nodes carry `label` and `shape`,
    edges carry `label` ("" when unlabeled). Parallel edges are kept, e.g. a
    decision whose Yes and No both go straight to End.
    """
    graph = nx.MultiDiGraph()
    for line in text.splitlines()[1:]:
        m = EDGE_RE.match(line)
        if m:
            graph.add_edge(m.group(1), m.group(3), label=m.group(2) or "")
            continue
        for pattern, shape in NODE_PATTERNS:
            m = pattern.match(line)
            if m:
                graph.add_node(m.group(1), label=m.group(2), shape=shape)
                break
    return graph


DOT_STYLES = {
    "terminator": {"shape": "ellipse", "style": "filled", "fillcolor": "lightgray"},
    "io": {"shape": "parallelogram", "style": "filled", "fillcolor": "lightyellow"},
    "decision": {"shape": "diamond", "style": "filled", "fillcolor": "lightblue"},
    "process": {"shape": "box"},
}


def flowchart_to_dot(text: str, name: str = "flow") -> graphviz.Digraph:
    graph = flowchart_to_graph(text)
    dot = graphviz.Digraph(name=name)
    for node_id, data in graph.nodes(data=True):
        dot.node(node_id, data.get("label", node_id), **DOT_STYLES[data.get("shape", "process")])
    for src, dst, data in graph.edges(data=True):
        if data["label"]:
            dot.edge(src, dst, label=data["label"])
        else:
            dot.edge(src, dst)
    return dot
