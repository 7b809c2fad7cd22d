# metrics_calculator.py
import ast
import logging
from typing import List

from radon.complexity import cc_visit
from radon.metrics import mi_visit
from radon.raw import analyze
from radon.visitors import ComplexityVisitor

from cfg_nodes import (SEQUENTIAL_KINDS, CFGNode, Decision, Event, Function, Loop, Switch,
                       TryCatch, collect_by_type, flatten_sequential, max_depth)

logger = logging.getLogger(__name__)

NESTING_NODES = (ast.If, ast.For, ast.AsyncFor, ast.While, ast.Try, ast.With, ast.AsyncWith)
MODULE_KEY = "<module>"


def cfg_complexity(nodes: List[CFGNode]) -> int:
    """McCabe-style count over a CFG: one path plus one per branch point."""
    cc = 1
    cc += len(collect_by_type(nodes, Decision))
    cc += len(collect_by_type(nodes, Loop))
    cc += len(collect_by_type(nodes, TryCatch))
    for switch in collect_by_type(nodes, Switch):
        cc += len([c for c in switch.cases if c.case_label != "default"])
    return cc


def _cfg_entry(nodes: List[CFGNode]) -> dict:
    return {
        "cyclomatic_complexity": cfg_complexity(nodes),
        "nesting_depth": max_depth(nodes),
        "steps": len(flatten_sequential(nodes, SEQUENTIAL_KINDS)),
    }


def cfg_metrics(cfg_nodes: List[CFGNode]) -> dict:
    metrics = {}
    functions = collect_by_type(cfg_nodes, Function)
    for fn in functions:
        metrics[fn.label] = _cfg_entry(fn.body)
    if not functions or any(not isinstance(n, Function) for n in cfg_nodes):
        metrics[MODULE_KEY] = _cfg_entry([n for n in cfg_nodes if not isinstance(n, Function)])
    return metrics


def python_metrics(code: str) -> dict:
    """Per-function numbers from radon, nesting from the ast. Raises SyntaxError on bad input."""
    metrics = {}
    tree = ast.parse(code)
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            func_code = ast.get_source_segment(code, node)
            cc = cc_visit(func_code)
            metrics[f"{node.name}()"] = {
                "cyclomatic_complexity": cc[0].complexity if cc else 1,
                "nesting_depth": _max_depth(node),
                "SLOC": analyze(func_code).sloc,
            }
    if not metrics:
        # plain script, no functions
        metrics[MODULE_KEY] = {
            "cyclomatic_complexity": ComplexityVisitor.from_ast(tree).complexity,
            "nesting_depth": _max_depth(tree),
            "SLOC": analyze(code).sloc,
        }
    return metrics


def calculate_metrics(cfg_nodes: List[CFGNode], code: str = "", language: str = "") -> dict:
    metrics = None
    overall = {}

    if language == "python" and code.strip():
        try:
            metrics = python_metrics(code)
            raw = analyze(code)
            overall.update({
                "maintainability_index": mi_visit(code, True),
                "loc": raw.loc,
                "sloc": raw.sloc,
                "comments": raw.comments,
                "multi": raw.multi,
                "blank": raw.blank,
            })
        except (SyntaxError, ValueError) as e:
            logger.warning("radon could not analyze the fragment (%s), using CFG metrics", e)
            metrics = None

    if metrics is None:
        metrics = cfg_metrics(cfg_nodes)
        lines = code.split("\n") if code else []
        overall.update({
            "loc": len(lines),
            "sloc": len([ln for ln in lines if ln.strip()]),
        })

    overall.update({
        "steps": len(flatten_sequential(cfg_nodes, SEQUENTIAL_KINDS)),
        "decisions": len(collect_by_type(cfg_nodes, Decision)),
        "loops": len(collect_by_type(cfg_nodes, Loop)),
        "switches": len(collect_by_type(cfg_nodes, Switch)),
        "try_blocks": len(collect_by_type(cfg_nodes, TryCatch)),
        "events": len(collect_by_type(cfg_nodes, Event)),
        "functions": len(collect_by_type(cfg_nodes, Function)),
    })
    metrics["_overall"] = overall
    return metrics


def _max_depth(node, current=0):
    """Deepest nesting of control statements below an ast node."""
    deepest = current
    for child in ast.iter_child_nodes(node):
        level = current + 1 if isinstance(child, NESTING_NODES) else current
        deepest = max(deepest, _max_depth(child, level))
    return deepest
