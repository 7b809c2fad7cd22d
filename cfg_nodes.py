# cfg_nodes.py
"""
Control-flow node types shared by every dialect.

A CFG is a plain list of nodes; structural nodes own nested lists. The tree
is always acyclic, loop back-edges only appear in rendered diagrams.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Union

SEQUENTIAL_KINDS = ("process", "io", "output", "return", "throw")
TERMINAL_KINDS = ("return", "throw")


@dataclass
class Sequential:
    kind: str
    label: str
    node_type = "sequential"


@dataclass
class Decision:
    condition: str
    yes_branch: List["CFGNode"] = field(default_factory=list)
    no_branch: List["CFGNode"] = field(default_factory=list)
    node_type = "decision"


@dataclass
class Loop:
    label: str
    loop_kind: str = "while"
    body: List["CFGNode"] = field(default_factory=list)
    node_type = "loop"


@dataclass
class SwitchCase:
    case_label: str
    body: List["CFGNode"] = field(default_factory=list)


@dataclass
class Switch:
    label: str
    cases: List[SwitchCase] = field(default_factory=list)
    node_type = "switch"


@dataclass
class TryCatch:
    try_body: List["CFGNode"] = field(default_factory=list)
    catch_param: str = "e"
    catch_body: List["CFGNode"] = field(default_factory=list)
    finally_body: List["CFGNode"] = field(default_factory=list)
    node_type = "tryCatch"


@dataclass
class Event:
    subject: str
    event_name: str
    label: str
    body: List["CFGNode"] = field(default_factory=list)
    node_type = "event"


@dataclass
class Function:
    label: str
    body: List["CFGNode"] = field(default_factory=list)
    node_type = "function"


@dataclass
class PromiseContinuation:
    label: str
    body: List["CFGNode"] = field(default_factory=list)
    node_type = "promise"


CFGNode = Union[Sequential, Decision, Loop, Switch, TryCatch, Event, Function, PromiseContinuation]


def is_terminal(node) -> bool:
    return isinstance(node, Sequential) and node.kind in TERMINAL_KINDS


def child_lists(node) -> List[List[CFGNode]]:
    """Every nested node list owned by a structural node."""
    if isinstance(node, Decision):
        return [node.yes_branch, node.no_branch]
    if isinstance(node, Switch):
        return [c.body for c in node.cases]
    if isinstance(node, TryCatch):
        return [node.try_body, node.catch_body, node.finally_body]
    if isinstance(node, (Loop, Event, Function, PromiseContinuation)):
        return [node.body]
    return []


def flatten_sequential(nodes: List[CFGNode], kinds=("process", "io", "output")) -> List[Sequential]:
    """Depth-first list of sequential steps of the given kinds."""
    result = []
    for node in nodes:
        if isinstance(node, Sequential) and node.kind in kinds:
            result.append(node)
        for body in child_lists(node):
            result.extend(flatten_sequential(body, kinds))
    return result


def collect_by_type(nodes: List[CFGNode], node_cls) -> list:
    """Depth-first list of every node that is an instance of node_cls."""
    result = []
    for node in nodes:
        if isinstance(node, node_cls):
            result.append(node)
        for body in child_lists(node):
            result.extend(collect_by_type(body, node_cls))
    return result


def max_depth(nodes: List[CFGNode], current: int = 0) -> int:
    """Deepest structural nesting below this list (functions do not count)."""
    deepest = current
    for node in nodes:
        if isinstance(node, Sequential):
            continue
        level = current if isinstance(node, Function) else current + 1
        deepest = max(deepest, level)
        for body in child_lists(node):
            deepest = max(deepest, max_depth(body, level))
    return deepest


def node_to_dict(node) -> Dict[str, Any]:
    data = asdict(node)
    data["type"] = node.kind if isinstance(node, Sequential) else node.node_type
    for key, value in list(data.items()):
        if isinstance(value, list) and key != "cases":
            data[key] = [node_to_dict(n) for n in getattr(node, key)]
    if isinstance(node, Switch):
        data["cases"] = [
            {"case_label": c.case_label, "body": [node_to_dict(n) for n in c.body]}
            for c in node.cases
        ]
    return data


def cfg_to_dicts(nodes: List[CFGNode]) -> List[Dict[str, Any]]:
    return [node_to_dict(n) for n in nodes]
