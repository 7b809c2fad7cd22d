# semantic_summarizer.py
"""
Plain-text outline of a CFG, meant to be pasted in front of a diagram prompt.

    === PRE-ANALYZED CODE STRUCTURE ===
    Language: javascript

    [SEQUENTIAL STEPS - execute in this exact order]:
      Step 1: [IO] Create read stream: in.txt
    ...
    [FLOWCHART STRUCTURE HINT]:
      Linear flow: Start → each step in order → End

    === END PRE-ANALYSIS ===
"""
from typing import List

from cfg_nodes import SEQUENTIAL_KINDS, CFGNode, Sequential

HEADER = "=== PRE-ANALYZED CODE STRUCTURE ==="
FOOTER = "=== END PRE-ANALYSIS ==="


def _step_line(node: Sequential) -> str:
    return f"[{node.kind.upper()}] {node.label}"


class SemanticSummarizer:
    def __init__(self):
        self.lines = []
        self.decisions = []
        self.loops = []
        self.try_blocks = []
        self.switches = []
        self.events = []

    def visit(self, node, indent=""):
        method = getattr(self, "visit_" + type(node).__name__)
        method(node, indent)

    def visit_body(self, nodes: List[CFGNode], indent: str):
        if not nodes:
            self.lines.append(f"{indent}(empty)")
            return
        for node in nodes:
            if isinstance(node, Sequential):
                self.lines.append(f"{indent}→ {_step_line(node)}")
            else:
                self.visit(node, indent)

    def visit_Decision(self, node, indent):
        self.decisions.append(node.condition)
        self.lines.append(f"\n{indent}[DECISION - if ({node.condition})]:")
        self.lines.append(f"{indent}  YES branch:")
        self.visit_body(node.yes_branch, indent + "    ")
        if node.no_branch:
            self.lines.append(f"{indent}  NO branch:")
            self.visit_body(node.no_branch, indent + "    ")
        else:
            self.lines.append(f"{indent}  NO branch: (continue)")

    def visit_Loop(self, node, indent):
        self.loops.append(node.label)
        self.lines.append(f"\n{indent}[LOOP - {node.label}]:")
        self.visit_body(node.body, indent + "  ")
        self.lines.append(f"{indent}  (loops back to condition check)")

    def visit_TryCatch(self, node, indent):
        self.try_blocks.append(node)
        self.lines.append(f"\n{indent}[TRY/CATCH BLOCK]:")
        self.lines.append(f"{indent}  TRY:")
        self.visit_body(node.try_body, indent + "    ")
        self.lines.append(f"{indent}  CATCH ({node.catch_param}):")
        self.visit_body(node.catch_body, indent + "    ")
        if node.finally_body:
            self.lines.append(f"{indent}  FINALLY:")
            self.visit_body(node.finally_body, indent + "    ")

    def visit_Switch(self, node, indent):
        self.switches.append(node.label)
        self.lines.append(f"\n{indent}[SWITCH: {node.label}]:")
        for case in node.cases:
            self.lines.append(f"{indent}  CASE [{case.case_label}]:")
            self.visit_body(case.body, indent + "    ")

    def visit_Event(self, node, indent):
        self.events.append(node)
        self.lines.append(f"\n{indent}[EVENT HANDLER: {node.label}]:")
        self.lines.append(f"{indent}  !! ASYNC BRANCH - separate path. ID: {node.subject}_{node.event_name}")
        self.visit_body(node.body, indent + "  ")

    def visit_Function(self, node, indent):
        self.lines.append(f"\n{indent}[FUNCTION: {node.label}]:")
        self.visit_body(node.body, indent + "  ")

    def visit_PromiseContinuation(self, node, indent):
        self.lines.append(f"\n{indent}[PROMISE: {node.label}]:")
        self.visit_body(node.body, indent + "  ")

    def summarize(self, nodes: List[CFGNode], language: str) -> str:
        """Render the outline for a whole CFG."""
        self.lines = [HEADER, f"Language: {language}\n"]

        steps = [n for n in nodes if isinstance(n, Sequential) and n.kind in SEQUENTIAL_KINDS]
        structural = [n for n in nodes if not isinstance(n, Sequential)]

        self.lines.append("[SEQUENTIAL STEPS - execute in this exact order]:")
        if not steps and not structural:
            self.lines.append("  (none detected)")
        elif not steps:
            self.lines.append("  (no top-level sequential steps)")
        for i, step in enumerate(steps, 1):
            self.lines.append(f"  Step {i}: {_step_line(step)}")

        for node in structural:
            self.visit(node)

        self.lines.append("\n[FLOWCHART STRUCTURE HINT]:")
        self.lines.extend(self._hint(len(steps)))
        self.lines.append(f"\n{FOOTER}")
        return "\n".join(self.lines)

    def _hint(self, step_count: int) -> List[str]:
        # the most demanding construct decides the hint
        if self.events:
            path = " → ".join(f"Step{i}" for i in range(1, step_count + 1))
            handlers = ", ".join(f"{e.subject}.on('{e.event_name}')" for e in self.events)
            return [
                f"  Main path: Start → {path + ' → ' if path else ''}EventWait",
                f"  EventWait branches to: {handlers}",
                "  Each handler branch ends at: End",
                "  !! CRITICAL: each handler = its own unique node. NEVER merge same-event handlers.",
            ]
        if self.try_blocks:
            return ["  Main path: try steps → success → End", "  Error path: catch steps → End"]
        if self.decisions:
            return ["  Use diamond nodes for all conditions. Both YES and NO branches must reach End."]
        if self.loops:
            return ["  Loop: Enter → [body] → condition check → (loop back or exit) → End"]
        return ["  Linear flow: Start → each step in order → End"]


def summarize(nodes: List[CFGNode], language: str) -> str:
    return SemanticSummarizer().summarize(nodes, language)


def fallback_summary(language: str, steps: List[Sequential]) -> str:
    """Outline built from a line scan when the structural pipeline gave up."""
    listed = "\n".join(f"  Step {i}: {_step_line(s)}" for i, s in enumerate(steps, 1)) or "  (none detected)"
    return f"{HEADER}\nLanguage: {language}\n\n[SEQUENTIAL STEPS]:\n{listed}\n\n{FOOTER}"


def failure_summary(language: str) -> str:
    return f"{HEADER}\nLanguage: {language}\n(analysis failed, sending raw code)\n{FOOTER}"
