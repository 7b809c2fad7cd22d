import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

from c_extractor import analyze_c
from cfg_nodes import Decision, Function, Loop, Sequential, Switch, SwitchCase
from metrics_calculator import calculate_metrics, cfg_complexity, cfg_metrics
from utils import display_name, explain_metrics

py_code = """
def main(items):
    if items:
        for x in items:
            print(x)
    return 1
"""

c_code = r"""
#include <stdio.h>

int main() {
    int n;
    printf("Enter a number: ");
    scanf("%d", &n);
    if (n > 0) {
        printf("Positive\n");
    } else {
        printf("Not positive\n");
    }
    for (int i = 0; i < n; i++) {
        printf("%d\n", i);
    }
    return 0;
}
"""


def test_python_metrics_from_radon():
    metrics = calculate_metrics([], py_code, "python")
    main = metrics["main()"]
    assert main["cyclomatic_complexity"] == 3
    assert main["nesting_depth"] == 2
    assert main["SLOC"] == 5
    overall = metrics["_overall"]
    assert "maintainability_index" in overall
    assert overall["sloc"] == 5


def test_invalid_python_falls_back_to_cfg(caplog):
    with caplog.at_level(logging.WARNING):
        metrics = calculate_metrics([Sequential("output", "Print: x")], "def broken(:\n    pass\n", "python")
    assert "radon could not analyze" in caplog.text
    assert metrics["<module>"] == {"cyclomatic_complexity": 1, "nesting_depth": 0, "steps": 1}
    assert metrics["_overall"]["loc"] == 3


def test_c_metrics_from_cfg():
    cfg = analyze_c(c_code)
    metrics = calculate_metrics(cfg, c_code, "c")
    assert metrics["int main()"] == {"cyclomatic_complexity": 3, "nesting_depth": 1, "steps": 7}
    assert "<module>" not in metrics
    overall = metrics["_overall"]
    assert overall["decisions"] == 1
    assert overall["loops"] == 1
    assert overall["functions"] == 1


def test_switch_cases_count_except_default():
    cfg = [Switch("Switch on x", [SwitchCase("1"), SwitchCase("2"), SwitchCase("default")])]
    assert cfg_complexity(cfg) == 3


def test_module_entry_next_to_functions():
    cfg = [Function("function f()", [Decision("a")]), Loop("While: b", "while", [Decision("c")])]
    metrics = cfg_metrics(cfg)
    assert metrics["function f()"]["cyclomatic_complexity"] == 2
    assert metrics["<module>"] == {"cyclomatic_complexity": 3, "nesting_depth": 2, "steps": 0}


def test_explain_metrics():
    text = explain_metrics({
        "main()": {"cyclomatic_complexity": 3, "nesting_depth": 2, "SLOC": 5},
        "big()": {"cyclomatic_complexity": 14, "nesting_depth": 5, "steps": 50},
        "_overall": {"loc": 60},
    })
    assert set(text) == {"main()", "big()"}
    assert "low (easy to understand)" in text["main()"]
    assert "**5** lines of code" in text["main()"]
    assert "⚠️" not in text["main()"]
    assert "high (complex, consider refactoring)" in text["big()"]
    assert "deep nesting" in text["big()"]
    assert "recognised steps" in text["big()"]
    assert "⚠️" in text["big()"]


def test_display_name():
    assert display_name("src\\lib\\main.c", "c") == "main.c"
    assert display_name("", "python") == "python snippet"
