# utils.py

def explain_metrics(metrics: dict) -> dict:
    """
    Generate human-readable explanations for each function's metrics.

    Args:
        metrics (dict): Dictionary of metrics per function, as returned by
            metrics_calculator.calculate_metrics:
            {
              "main()": {"cyclomatic_complexity": 5, "nesting_depth": 2, "steps": 15},
              "_overall": {...},
            }
            Python sources report "SLOC" instead of "steps".

    Returns:
        dict: {function_name: explanation_string}; "_overall" is skipped.
    """
    explanations = {}

    for func, data in metrics.items():
        if func == "_overall":
            continue
        cc = data.get("cyclomatic_complexity", 1)
        nesting = data.get("nesting_depth", 0)
        if "SLOC" in data:
            size, unit = data["SLOC"], "lines of code"
        else:
            size, unit = data.get("steps", 0), "recognised steps"

        # Heuristic interpretation
        if cc <= 5:
            cc_text = "low (easy to understand)"
        elif cc <= 10:
            cc_text = "moderate (some branching)"
        else:
            cc_text = "high (complex, consider refactoring)"

        if nesting <= 2:
            nesting_text = "shallow nesting"
        elif nesting <= 4:
            nesting_text = "moderate nesting"
        else:
            nesting_text = "deep nesting (harder to follow)"

        explanation = (
            f"`{func}` has cyclomatic complexity **{cc}** ({cc_text}), "
            f"maximum nesting depth **{nesting}** ({nesting_text}), and about **{size}** {unit}. "
        )

        if cc > 12 or nesting > 8 or size > 40:
            explanation += "⚠️ This part of the code may be hard to maintain."

        explanations[func] = explanation

    return explanations


def display_name(file_path: str, language: str) -> str:
    """Title for diagrams: the file name when known, otherwise the language."""
    name = (file_path or "").replace("\\", "/").rsplit("/", 1)[-1]
    return name or f"{language} snippet"
