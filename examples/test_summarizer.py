import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cfg_nodes import Decision, Event, Loop, Sequential, Switch, SwitchCase, TryCatch
from semantic_summarizer import SemanticSummarizer, failure_summary, fallback_summary, summarize


def test_linear_summary():
    text = summarize([Sequential("io", "Read file: a.txt"), Sequential("return", "Return: data")], "javascript")
    assert text == "\n".join([
        "=== PRE-ANALYZED CODE STRUCTURE ===",
        "Language: javascript",
        "",
        "[SEQUENTIAL STEPS - execute in this exact order]:",
        "  Step 1: [IO] Read file: a.txt",
        "  Step 2: [RETURN] Return: data",
        "",
        "[FLOWCHART STRUCTURE HINT]:",
        "  Linear flow: Start → each step in order → End",
        "",
        "=== END PRE-ANALYSIS ===",
    ])


def test_empty_cfg():
    text = summarize([], "c")
    assert "  (none detected)" in text.splitlines()


def test_decision_branches():
    text = summarize([Decision("x > 1", [Sequential("output", "Log: big")])], "javascript")
    lines = text.splitlines()
    assert "  (no top-level sequential steps)" in lines
    assert "[DECISION - if (x > 1)]:" in lines
    assert "  YES branch:" in lines
    assert "    → [OUTPUT] Log: big" in lines
    assert "  NO branch: (continue)" in lines
    assert "  Use diamond nodes for all conditions. Both YES and NO branches must reach End." in lines


def test_nested_structures():
    cfg = [
        Loop("While: running", "while", [
            Switch("Switch on cmd", [SwitchCase("'q'", [Sequential("process", "Stop")]), SwitchCase("default", [])]),
        ]),
        TryCatch([], "err", [Sequential("output", "Log: failed")], [Sequential("output", "Log: done")]),
    ]
    lines = summarize(cfg, "typescript").splitlines()
    assert "[LOOP - While: running]:" in lines
    assert "  [SWITCH: Switch on cmd]:" in lines
    assert "    CASE ['q']:" in lines
    assert "      → [PROCESS] Stop" in lines
    assert "    CASE [default]:" in lines
    assert "      (empty)" in lines
    assert "  (loops back to condition check)" in lines
    assert "[TRY/CATCH BLOCK]:" in lines
    assert "  CATCH (err):" in lines
    assert "  FINALLY:" in lines
    # try/catch outranks loops in the hint
    assert "  Main path: try steps → success → End" in lines


def test_event_hint_lists_handlers():
    cfg = [
        Sequential("io", "Listen on port port"),
        Event("server", "request", "server.on('request')", [Sequential("output", "Send response (send)")]),
        Event("server", "close", "server.on('close')", []),
    ]
    summarizer = SemanticSummarizer()
    lines = summarizer.summarize(cfg, "javascript").splitlines()
    assert "  !! ASYNC BRANCH - separate path. ID: server_request" in lines
    assert "  Main path: Start → Step1 → EventWait" in lines
    assert "  EventWait branches to: server.on('request'), server.on('close')" in lines
    assert len(summarizer.events) == 2


def test_degraded_summaries():
    text = fallback_summary("javascript", [Sequential("output", "Log: hi")])
    assert "[SEQUENTIAL STEPS]:\n  Step 1: [OUTPUT] Log: hi" in text
    assert "(none detected)" in fallback_summary("javascript", [])
    assert "analysis failed" in failure_summary("c")
