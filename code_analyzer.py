# code_analyzer.py
"""
Entry points: `analyze` turns source text into a CFG plus a text outline,
`render_diagram` turns a CFG into Mermaid flowchart or mindmap text.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from c_extractor import analyze_c
from cfg_builder import build_cfg_from_source
from cfg_nodes import (CFGNode, Decision, Event, Loop, Sequential, cfg_to_dicts,
                       collect_by_type, flatten_sequential)
from flowchart_generator import render_flowchart
from language_detect import dialect_for, resolve_language
from mindmap_generator import render_mindmap
from patterns import StatementPattern, match_statement
from python_extractor import analyze_python, python_has_structure
from semantic_summarizer import failure_summary, fallback_summary, summarize

logger = logging.getLogger(__name__)

DIAGRAM_KINDS = ("flowchart", "mindmap")

# last-resort scan for brace-family sources, one line at a time
FALLBACK_PATTERNS = [
    StatementPattern(r"createReadStream\s*\(\s*['\"`]([^'\"`]+)['\"`]", "io",
                     lambda m: f"Create read stream: {m.group(1)}"),
    StatementPattern(r"createWriteStream\s*\(\s*['\"`]([^'\"`]+)['\"`]", "io",
                     lambda m: f"Create write stream: {m.group(1)}"),
    StatementPattern(r"(\w+)\.pipe\s*\(\s*(\w+)", "process", lambda m: f"Pipe {m.group(1)} to {m.group(2)}"),
    StatementPattern(r"console\.\w+\s*\(\s*['\"`]([^'\"`]{1,60})['\"`]", "output",
                     lambda m: f"Log: {m.group(1)[:45]}"),
    StatementPattern(r"fetch\s*\(\s*['\"`]([^'\"`]{1,50})['\"`]", "io",
                     lambda m: "Fetch " + m.group(1).split("://", 1)[-1][:35]),
]


@dataclass
class AnalysisResult:
    language: str
    dialect: str
    cfg_nodes: List[CFGNode] = field(default_factory=list)
    has_structure: bool = False
    summary: str = ""

    @property
    def sequential(self) -> List[Sequential]:
        return flatten_sequential(self.cfg_nodes)

    @property
    def conditionals(self) -> List[Decision]:
        return collect_by_type(self.cfg_nodes, Decision)

    @property
    def loops(self) -> List[Loop]:
        return collect_by_type(self.cfg_nodes, Loop)

    @property
    def events(self) -> List[Event]:
        return collect_by_type(self.cfg_nodes, Event)

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "dialect": self.dialect,
            "has_structure": self.has_structure,
            "summary": self.summary,
            "cfg_nodes": cfg_to_dicts(self.cfg_nodes),
        }


def fallback_steps(code: str) -> List[Sequential]:
    steps = []
    last = None
    for line in code.split("\n"):
        text = line.strip()
        if not text or text.startswith("//") or ".on(" in text.replace(" ", ""):
            continue
        node = match_statement(text, FALLBACK_PATTERNS, max_len=48)
        if node and node.label != last:
            steps.append(node)
            last = node.label
    return steps


def _extract(code: str, dialect: str) -> List[CFGNode]:
    if dialect == "systems":
        return analyze_c(code)
    if dialect == "indentation":
        return analyze_python(code)
    return build_cfg_from_source(code)


def analyze(code: str, file_path: str = "", dialect_hint: str = "") -> AnalysisResult:
    """
    Analyze one source fragment.

    Args:
        code: source text, any size, possibly malformed.
        file_path: optional path used for extension-based detection.
        dialect_hint: optional language name (javascript, c, python, ...).

    Returns:
        AnalysisResult; `has_structure` is False when nothing usable was found
        or the extractor failed, in which case callers should fall back to the
        raw text.
    """
    code = code or ""
    language = resolve_language(code, file_path, (dialect_hint or "").lower())
    dialect = dialect_for(language)
    logger.debug("analyzing %d chars as %s (%s dialect)", len(code), language, dialect)

    try:
        nodes = _extract(code, dialect)
    except Exception:
        logger.warning("%s extractor failed on %s source, returning degraded result",
                       dialect, language, exc_info=True)
        if dialect == "brace":
            summary = fallback_summary(language, fallback_steps(code))
        else:
            summary = failure_summary(language)
        return AnalysisResult(language, dialect, [], False, summary)

    has_structure = python_has_structure(nodes) if dialect == "indentation" else bool(nodes)
    return AnalysisResult(language, dialect, nodes, has_structure, summarize(nodes, language))


def render_diagram(cfg_nodes: List[CFGNode], kind: str = "flowchart", title: str = "Code structure") -> str:
    if kind == "flowchart":
        return render_flowchart(cfg_nodes)
    if kind == "mindmap":
        return render_mindmap(cfg_nodes, title)
    raise ValueError(f"unknown diagram kind {kind!r}, expected one of {DIAGRAM_KINDS}")
