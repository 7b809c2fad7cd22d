# c_extractor.py
"""
Line-oriented control-flow extractor for C and C++ sources.

Does not go through the lexer/block segmenter: function bodies and nested
regions are cut out of the raw lines by brace-depth counting, which covers
`if (x) {`, brace on the following line, single-line blocks, `} else {` and
brace-less single statements.
"""
import re
from typing import List, Tuple

from cfg_nodes import CFGNode, Decision, Function, Loop, Switch, SwitchCase
from patterns import StatementPattern, match_statement, skip

C_TYPES = "int|void|float|double|char|long|short|unsigned|bool"

# `int main(void) {`, `struct node *make(int v)`, `void Counter::tick(int n) {`, `std::string name() const`
FUNCTION_HEADER_RE = re.compile(
    r"^(?:(?:static|inline|extern|virtual)\s+)*"
    r"(?P<rtype>(?:(?:struct|enum|unsigned|signed|const|long|short)\s+)*[A-Za-z_][\w:]*(?:<[^()]*>)?)"
    r"(?:\s*[*&]+\s*|\s+)(?P<name>~?\w+(?:::~?\w+)*)\s*\([^)]*\)\s*(?:const\s*)?\{?$")
NOT_FUNCTION_WORDS = frozenset(["if", "else", "while", "for", "switch", "do", "return", "case",
                                "new", "delete", "throw", "goto", "sizeof"])
FORMAT_SPEC_RE = re.compile(r"%[-+ #0]*\d*(?:\.\d+)?(?:hh|h|ll|l|L|z|j|t)?[diouxXeEfgGscp]")


def sanitize_c_label(text: str) -> str:
    """a[j] -> a(j), double quotes -> single quotes, max 45 chars."""
    text = re.sub(r"\[([^\]]+)\]", r"(\1)", text)
    return text.replace('"', "'").strip()[:45]


def _printf_label(m):
    fmt = re.sub(r"\\[nt]", "", m.group(1))
    fmt = FORMAT_SPEC_RE.sub("", fmt).strip()
    if len(fmt) >= 2:
        return f"Print: {fmt[:45]}"
    if m.group(2):
        return f"Print: {sanitize_c_label(m.group(2).strip())[:35]}"
    return "Print output"


def _declare_label(m):
    names = " ".join(m.group(2).split())[:30]
    return "Declare: " + sanitize_c_label(f"{m.group(1)} {names}")


def _scanf_label(m):
    names = sanitize_c_label(re.sub(r"\s+", " ", m.group(1).replace("&", "")).strip())
    return f"Input: read {names[:35]}"


C_PATTERNS = [
    # preprocessor
    skip(r"^#\s*include\s*[<\"]"),
    skip(r"^#\s*define\s+"),
    skip(r"^#\s*pragma\s+"),
    skip(r"^#\s*(if|end|else|elif)"),
    skip(r"^(break|continue)\s*;"),
    skip(r"^using\s+namespace\b"),

    # declarations
    StatementPattern(r"^(" + C_TYPES + r")\s+(\w[\w\s,*\[\]]*)\s*;", "process", _declare_label),
    StatementPattern(r"^(" + C_TYPES + r")\s+(\w+)\s*=\s*([^;]{1,40})\s*;", "process",
                     lambda m: f"Initialize: {m.group(1)} {m.group(2)} = {sanitize_c_label(m.group(3))}"),
    StatementPattern(r"^struct\s+(\w+)\s+(\w+)", "process", lambda m: f"Declare struct: {m.group(2)}"),

    # console output / input
    StatementPattern(r"\bprintf\s*\(\s*\"([^\"]*)(?:\"\s*,\s*([^)]{1,50}))?", "output", _printf_label),
    StatementPattern(r"\bprintf\s*\(", "output", lambda m: "Print output"),
    StatementPattern(r"\bscanf\s*\(\s*\"[^\"]*\"\s*,\s*([^)]{1,60})", "io", _scanf_label),
    StatementPattern(r"\bscanf\s*\(", "io", lambda m: "Read input (scanf)"),
    StatementPattern(r"\bfgets\s*\(\s*(\w+)", "io", lambda m: f"Input: fgets({m.group(1)})"),
    StatementPattern(r"\bgets\s*\(\s*(\w+)", "io", lambda m: f"Input: gets({m.group(1)})"),
    StatementPattern(r"\bgetchar\s*\(\s*\)", "io", lambda m: "Input: getchar"),
    StatementPattern(r"\bputs\s*\(\s*\"([^\"]{1,40})\"", "output", lambda m: f"Print: {m.group(1)[:35]}"),
    StatementPattern(r"\bputs\s*\(", "output", lambda m: "Print output"),
    StatementPattern(r"\bputchar\s*\(", "output", lambda m: "Print: putchar"),
    StatementPattern(r"\bcout\s*<<\s*\"([^\"]{1,40})\"", "output", lambda m: f"Print: {m.group(1)[:35]}"),
    StatementPattern(r"\bcout\s*<<", "output", lambda m: "Print output"),
    StatementPattern(r"\bcin\s*>>\s*(\w+)", "io", lambda m: f"Input: read {m.group(1)}"),

    # file handles
    StatementPattern(r"\bfopen\s*\(\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"", "io",
                     lambda m: f"Open file: {m.group(1)} ({m.group(2)})"),
    StatementPattern(r"\bfopen\s*\(", "io", lambda m: "Open file (fopen)"),
    StatementPattern(r"\bfclose\s*\(\s*(\w+)", "io", lambda m: f"Close file: {m.group(1)}"),
    StatementPattern(r"\bfprintf\s*\(", "output", lambda m: "Write to file (fprintf)"),
    StatementPattern(r"\bfscanf\s*\(", "io", lambda m: "Read from file (fscanf)"),
    StatementPattern(r"\bfread\s*\(", "io", lambda m: "Read binary (fread)"),
    StatementPattern(r"\bfwrite\s*\(", "io", lambda m: "Write binary (fwrite)"),

    # dynamic memory
    StatementPattern(r"\bmalloc\s*\((.{1,30})\)", "process",
                     lambda m: f"Allocate memory: malloc({m.group(1).strip()[:20]})"),
    StatementPattern(r"\bcalloc\s*\(", "process", lambda m: "Allocate memory: calloc"),
    StatementPattern(r"\brealloc\s*\(", "process", lambda m: "Resize memory: realloc"),
    StatementPattern(r"\bfree\s*\(\s*(\w+)", "process", lambda m: f"Free memory: {m.group(1)}"),

    # string / math library
    StatementPattern(r"\bsqrt\s*\((.{1,20})\)", "process", lambda m: f"Calculate: sqrt({m.group(1).strip()})"),
    StatementPattern(r"\bpow\s*\(\s*(\w+)\s*,\s*(\w+)\s*\)", "process",
                     lambda m: f"Calculate: {m.group(1)} ^ {m.group(2)}"),
    StatementPattern(r"\babs\s*\((.{1,20})\)", "process", lambda m: f"Calculate: abs({m.group(1).strip()})"),
    StatementPattern(r"\bstrcpy\s*\(", "process", lambda m: "Copy string (strcpy)"),
    StatementPattern(r"\bstrcat\s*\(", "process", lambda m: "Concatenate strings (strcat)"),
    StatementPattern(r"\bstrlen\s*\(\s*(\w+)", "process", lambda m: f"Get length: strlen({m.group(1)})"),
    StatementPattern(r"\bstrcmp\s*\(", "process", lambda m: "Compare strings (strcmp)"),
    StatementPattern(r"\bsprintf\s*\(", "process", lambda m: "Format string (sprintf)"),
    StatementPattern(r"\brand\s*\(\s*\)", "process", lambda m: "Generate random number"),

    # assignments
    StatementPattern(r"^(\w+)\[([^\]]+)\]\s*=\s*([^;=][^;]{0,39})\s*;", "process",
                     lambda m: f"Assign: {sanitize_c_label(m.group(1) + '[' + m.group(2) + ']')} = "
                               f"{sanitize_c_label(m.group(3).strip())}"),
    StatementPattern(r"^(\w+)\s*=\s*(\w+)\s*([-+*/%])\s*(\w+)\s*;", "process",
                     lambda m: f"Calculate: {m.group(1)} = {m.group(2)} {m.group(3)} {m.group(4)}"),
    StatementPattern(r"^(\w+)\s*\+\+\s*;|^\+\+\s*(\w+)\s*;", "process",
                     lambda m: f"Increment: {m.group(1) or m.group(2)}++"),
    StatementPattern(r"^(\w+)\s*--\s*;|^--\s*(\w+)\s*;", "process",
                     lambda m: f"Decrement: {m.group(1) or m.group(2)}--"),
    StatementPattern(r"^(\w+)\s*([-+*/%])=\s*(.{1,30})\s*;", "process",
                     lambda m: f"Update: {m.group(1)} {m.group(2)}= {sanitize_c_label(m.group(3).strip())}"),
    StatementPattern(r"^(\w+)\s*=\s*([^;=][^;]{0,39})\s*;", "process",
                     lambda m: f"Assign: {m.group(1)} = {sanitize_c_label(m.group(2).strip())}"),

    # leaving
    StatementPattern(r"\bexit\s*\(\s*(\d+)\s*\)", "return", lambda m: f"Exit program ({m.group(1)})"),
    StatementPattern(r"\bexit\s*\(\s*(\w+)\s*\)", "return", lambda m: f"Exit: {m.group(1)}"),
    StatementPattern(r"^return\s+(\d+)\s*;", "return", lambda m: f"Return {m.group(1)}"),
    StatementPattern(r"^return\s+(\w+)\s*;", "return", lambda m: f"Return: {m.group(1)}"),
    StatementPattern(r"^return\s*\(?\s*([^;]{1,40}?)\s*\)?\s*;", "return",
                     lambda m: f"Return: {sanitize_c_label(m.group(1))}"),
    StatementPattern(r"^return\s*;", "return", lambda m: "Return"),

    # anything that looks like a plain call
    StatementPattern(r"^(\w+)\s*\(([^)]{0,40})\)\s*;", "process",
                     lambda m: f"Call: {m.group(1)}({m.group(2).strip()[:25]})"),
]


def strip_comments(code: str) -> str:
    code = re.sub(r"/\*.*?\*/", " ", code, flags=re.S)
    return re.sub(r"//[^\n]*", "", code)


def paren_group(text: str, start: int) -> Tuple[str, int]:
    """Contents of the balanced (...) opening at text[start], and the index after it."""
    depth = 0
    for pos in range(start, len(text)):
        if text[pos] == "(":
            depth += 1
        elif text[pos] == ")":
            depth -= 1
            if depth == 0:
                return text[start + 1:pos], pos + 1
    return text[start + 1:], len(text)


def split_c_statements(line: str) -> List[str]:
    """Split `a = 1; b = 2;` into statements, ignoring `;` in parens and strings."""
    parts = []
    current = ""
    depth = 0
    quote = None
    for ch in line:
        current += ch
        if quote:
            if ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        elif ch == ";" and depth == 0:
            parts.append(current.strip())
            current = ""
    if current.strip():
        parts.append(current.strip())
    return parts


def collect_block(lines: List[str], i: int) -> Tuple[List[str], int]:
    """
    Body lines of the `{ ... }` region whose opening brace is on lines[i] or
    the first line after it that has one. Returns (body, index to resume at).

    When text follows the closing brace on the same line (`} else {`), that
    line is rewritten to the leftover text and the returned index points at it.
    """
    while i < len(lines) and "{" not in lines[i]:
        i += 1
    body = []
    depth = 0
    started = False
    while i < len(lines):
        line = lines[i]
        current = ""
        for pos, ch in enumerate(line):
            if ch == "{":
                depth += 1
                if not started:
                    started = True
                    continue
            elif ch == "}":
                depth -= 1
                if started and depth == 0:
                    if current.strip():
                        body.append(current)
                    rest = line[pos + 1:].strip()
                    if rest and rest != ";":
                        lines[i] = rest
                        return body, i
                    return body, i + 1
            if started:
                current += ch
        if current.strip():
            body.append(current)
        i += 1
    return body, i


def _next_code_line(lines: List[str], i: int) -> int:
    while i < len(lines) and not lines[i].strip():
        i += 1
    return i


def function_header(line: str):
    """Match for a function definition header, or None."""
    m = FUNCTION_HEADER_RE.match(line)
    if not m or m.group("rtype") in NOT_FUNCTION_WORDS or m.group("name") in NOT_FUNCTION_WORDS:
        return None
    return m


def brace_delta(line: str) -> int:
    """Net `{` minus `}` on a line, ignoring string and char literals."""
    depth = 0
    quote = None
    escaped = False
    for ch in line:
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
    return depth


class CExtractor:
    """Recovers if/else, loops and switch statements from C-like source lines."""

    def analyze(self, code: str) -> List[CFGNode]:
        lines = strip_comments(code).split("\n")
        nodes: List[CFGNode] = []
        # lines outside any function definition, analysed in order between functions
        loose: List[str] = []
        i = 0
        while i < len(lines):
            m = function_header(lines[i].strip())
            if m:
                nodes.extend(self.analyze_lines(loose))
                loose = []
                body, i = collect_block(lines, i)
                nodes.append(Function(f"{m.group('rtype')} {m.group('name')}()", self.analyze_lines(body)))
                continue
            loose.append(lines[i])
            i += 1
        nodes.extend(self.analyze_lines(loose))
        return nodes

    def analyze_lines(self, lines: List[str]) -> List[CFGNode]:
        lines = list(lines)
        nodes: List[CFGNode] = []
        i = 0
        while i < len(lines):
            line = lines[i].strip()
            if not line or line in ("{", "}", "};"):
                i += 1
                continue

            if re.match(r"(?:else\s+)?if\s*\(", line):
                node, i = self._if_chain(lines, i)
                nodes.append(node)
            elif re.match(r"for\s*\(", line):
                inner, end = paren_group(line, line.index("("))
                parts = inner.split(";")
                cond = sanitize_c_label(parts[1].strip()[:40]) if len(parts) >= 3 else ""
                body, i = self._body(lines, i, line[end:])
                nodes.append(Loop(f"For: {cond or 'condition'}", "for", self.analyze_lines(body)))
            elif re.match(r"while\s*\(", line):
                inner, end = paren_group(line, line.index("("))
                body, i = self._body(lines, i, line[end:])
                nodes.append(Loop(f"While: {sanitize_c_label(inner.strip()[:40])}", "while",
                                  self.analyze_lines(body)))
            elif re.match(r"do\b", line):
                body, i = self._body(lines, i, line[2:])
                j = _next_code_line(lines, i)
                if j < len(lines) and re.match(r"while\s*\(", lines[j].strip()):
                    i = j + 1
                nodes.append(Loop("do...while loop", "do-while", self.analyze_lines(body)))
            elif re.match(r"switch\s*\(", line):
                inner, end = paren_group(line, line.index("("))
                body, i = self._body(lines, i, line[end:])
                expr = sanitize_c_label(inner.strip()[:30])
                nodes.append(Switch(f"Switch on {expr}", self.switch_cases(body)))
            else:
                nodes.extend(self._statements(line))
                i += 1
        return nodes

    def _statements(self, line: str) -> List[CFGNode]:
        found = []
        for stmt in split_c_statements(line):
            node = match_statement(stmt, C_PATTERNS)
            if node:
                found.append(node)
        return found

    def _body(self, lines: List[str], i: int, rest: str) -> Tuple[List[str], int]:
        """Body of the construct whose header is lines[i]; `rest` is the header text after its condition."""
        rest = rest.strip()
        if rest.startswith("{"):
            lines[i] = rest
            return collect_block(lines, i)
        if rest == ";":
            return [], i + 1
        if rest:
            return [rest], i + 1
        j = _next_code_line(lines, i + 1)
        if j >= len(lines):
            return [], j
        if lines[j].strip().startswith("{"):
            return collect_block(lines, j)
        return [lines[j]], j + 1

    def _if_chain(self, lines: List[str], i: int) -> Tuple[Decision, int]:
        line = lines[i].strip()
        inner, end = paren_group(line, line.index("("))
        body, i = self._body(lines, i, line[end:])
        node = Decision(sanitize_c_label(inner.strip()[:60]), self.analyze_lines(body))

        j = _next_code_line(lines, i)
        if j < len(lines):
            nxt = lines[j].strip()
            if re.match(r"else\s+if\s*\(", nxt):
                branch, i = self._if_chain(lines, j)
                node.no_branch = [branch]
            elif re.match(r"else\b", nxt):
                else_body, i = self._body(lines, j, nxt[4:])
                node.no_branch = self.analyze_lines(else_body)
        return node, i

    def switch_cases(self, lines: List[str]) -> List[SwitchCase]:
        clauses = []
        depth = 0
        for line in lines:
            text = line.strip()
            # labels of a nested switch belong to that switch's own body
            case_m = re.match(r"case\s+(.+?)\s*:(?!:)", text) if depth == 0 else None
            if case_m or (depth == 0 and re.match(r"default\s*:", text)):
                label = case_m.group(1) if case_m else "default"
                after = text[case_m.end():] if case_m else text.split(":", 1)[1]
                clauses.append((label, [after.strip()] if after.strip() else []))
            elif clauses:
                clauses[-1][1].append(line)
            depth = max(depth + brace_delta(text), 0)
        return [
            SwitchCase(label, self.analyze_lines([ln for ln in body if not re.match(r"\s*break\s*;", ln)]))
            for label, body in clauses
        ]


def analyze_c(code: str) -> List[CFGNode]:
    return CExtractor().analyze(code)
