import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from c_extractor import (analyze_c, brace_delta, collect_block, function_header, paren_group, sanitize_c_label,
                         split_c_statements)
from cfg_nodes import Decision, Function, Loop, Sequential, Switch

code = r"""
#include <stdio.h>

/* read a number and count up to it */
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


def labels(nodes):
    return [n.label for n in nodes]


def test_main_function():
    cfg = analyze_c(code)
    assert len(cfg) == 1
    fn = cfg[0]
    assert isinstance(fn, Function)
    assert fn.label == "int main()"

    declare, prompt, read, decision, loop, ret = fn.body
    assert declare == Sequential("process", "Declare: int n")
    assert prompt == Sequential("output", "Print: Enter a number:")
    assert read == Sequential("io", "Input: read n")
    assert isinstance(decision, Decision)
    assert decision.condition == "n > 0"
    assert labels(decision.yes_branch) == ["Print: Positive"]
    assert labels(decision.no_branch) == ["Print: Not positive"]
    assert isinstance(loop, Loop)
    assert loop.label == "For: i < n"
    assert labels(loop.body) == ["Print: i"]
    assert ret == Sequential("return", "Return 0")


def test_else_if_chain():
    cfg = analyze_c(r"""
void sign(int x)
{
    if (x > 0) {
        printf("pos\n");
    } else if (x < 0) {
        printf("neg\n");
    } else {
        printf("zero\n");
    }
    puts("done");
}
""")
    fn = cfg[0]
    assert fn.label == "void sign()"
    decision, done = fn.body
    assert labels(decision.yes_branch) == ["Print: pos"]
    nested = decision.no_branch[0]
    assert nested.condition == "x < 0"
    assert labels(nested.yes_branch) == ["Print: neg"]
    assert labels(nested.no_branch) == ["Print: zero"]
    assert done.label == "Print: done"


def test_braceless_bodies_and_do_while():
    cfg = analyze_c("""
int count(int n) {
    int i = 0;
    if (n < 0)
        return 1;
    while (n > 0) n--;
    do {
        i++;
    } while (i < 5);
    return i;
}
""")
    init, guard, loop, do_loop, ret = cfg[0].body
    assert init.label == "Initialize: int i = 0"
    assert labels(guard.yes_branch) == ["Return 1"]
    assert guard.no_branch == []
    assert loop.label == "While: n > 0"
    assert labels(loop.body) == ["Decrement: n--"]
    assert do_loop.loop_kind == "do-while"
    assert labels(do_loop.body) == ["Increment: i++"]
    assert ret.label == "Return: i"


def test_switch_cases_drop_break():
    cfg = analyze_c(r"""
int main() {
    switch (choice) {
        case 1:
            printf("One\n");
            break;
        case 2:
            printf("Two\n");
            break;
        default:
            printf("Other\n");
    }
    return 0;
}
""")
    switch = cfg[0].body[0]
    assert isinstance(switch, Switch)
    assert switch.label == "Switch on choice"
    assert [c.case_label for c in switch.cases] == ["1", "2", "default"]
    assert [labels(c.body) for c in switch.cases] == [["Print: One"], ["Print: Two"], ["Print: Other"]]


def test_statement_table():
    cfg = analyze_c("""
void work() {
    char name[20];
    int *p = malloc(10 * sizeof(int));
    FILE *fp = fopen("data.txt", "r");
    a[j] = a[j + 1];
    c = a + b;
    total += c;
    x = strlen(name);
    fclose(fp);
    free(p);
    exit(1);
}
""")
    assert [(n.kind, n.label) for n in cfg[0].body] == [
        ("process", "Declare: char name(20)"),
        ("process", "Allocate memory: malloc(10 * sizeof(int))"),
        ("io", "Open file: data.txt (r)"),
        ("process", "Assign: a(j) = a(j + 1)"),
        ("process", "Calculate: c = a + b"),
        ("process", "Update: total += c"),
        ("process", "Get length: strlen(name)"),
        ("io", "Close file: fp"),
        ("process", "Free memory: p"),
        ("return", "Exit program (1)"),
    ]


def test_several_statements_on_one_line():
    cfg = analyze_c("int main() {\n    t = a; a = b; b = t;\n}")
    assert labels(cfg[0].body) == ["Assign: t = a", "Assign: a = b", "Assign: b = t"]


def test_helpers():
    assert sanitize_c_label('arr[i] == "x"') == "arr(i) == 'x'"
    assert paren_group("if (a && (b || c)) {", 3) == ("a && (b || c)", 18)
    assert split_c_statements('printf("a;b"); x = f(1; 2);') == ['printf("a;b");', "x = f(1; 2);"]


def test_collect_block_leaves_else_behind():
    lines = ["if (x) {", "  a();", "} else {", "  b();", "}"]
    body, resume = collect_block(lines, 0)
    assert body == ["  a();"]
    assert resume == 2
    assert lines[2] == "else {"


def test_nested_switch_keeps_its_own_cases():
    cfg = analyze_c(r"""
int main() {
    switch (a) {
        case 1:
            switch (b) {
                case 10:
                    printf("ten\n");
                    break;
                case 20:
                    printf("twenty\n");
                    break;
            }
            break;
        case 2:
            printf("two\n");
            break;
    }
    return 0;
}
""")
    outer = cfg[0].body[0]
    assert [c.case_label for c in outer.cases] == ["1", "2"]
    inner = outer.cases[0].body[0]
    assert isinstance(inner, Switch)
    assert inner.label == "Switch on b"
    assert [c.case_label for c in inner.cases] == ["10", "20"]
    assert [labels(c.body) for c in inner.cases] == [["Print: ten"], ["Print: twenty"]]
    assert labels(outer.cases[1].body) == ["Print: two"]


def test_qualified_method_header():
    cfg = analyze_c(r"""
void Counter::tick(int n) {
    for (int i = 0; i < n; i++) {
        printf("tick\n");
    }
}
""")
    fn = cfg[0]
    assert isinstance(fn, Function)
    assert fn.label == "void Counter::tick()"
    loop = fn.body[0]
    assert isinstance(loop, Loop)
    assert loop.label == "For: i < n"
    assert labels(loop.body) == ["Print: tick"]


def test_struct_pointer_return_type():
    cfg = analyze_c("""
struct node *make(int v) {
    struct node *p = malloc(v);
    if (p == NULL) {
        return NULL;
    }
    p->v = v;
    return p;
}
""")
    fn = cfg[0]
    assert fn.label == "struct node make()"
    alloc, guard, ret = fn.body
    assert alloc == Sequential("process", "Allocate memory: malloc(v)")
    assert isinstance(guard, Decision)
    assert guard.condition == "p == NULL"
    assert guard.yes_branch == [Sequential("return", "Return: NULL")]
    assert ret == Sequential("return", "Return: p")


def test_other_return_types():
    assert function_header("size_t count(const char *s) {").group("name") == "count"
    assert function_header("std::string Person::name() const {").group("rtype") == "std::string"
    assert function_header("static unsigned long hash(int k)").group("rtype") == "unsigned long"
    assert function_header("} else if (x) {") is None
    assert function_header("else if (x) {") is None
    assert function_header("return max(a, b);") is None


def test_fragment_without_function_keeps_structure():
    cfg = analyze_c(r"""
int total = 0;
for (i = 0; i < 3; i++) {
    if (i == 1) {
        printf("one\n");
    }
}
""")
    init, loop = cfg
    assert init.label == "Initialize: int total = 0"
    assert isinstance(loop, Loop)
    assert loop.label == "For: i < 3"
    decision = loop.body[0]
    assert decision.condition == "i == 1"
    assert labels(decision.yes_branch) == ["Print: one"]


def test_top_level_lines_stay_in_order_around_functions():
    cfg = analyze_c("""
int limit = 10;

void reset() {
    count = 0;
}
""")
    assert [type(n).__name__ for n in cfg] == ["Sequential", "Function"]
    assert cfg[0].label == "Initialize: int limit = 10"
    assert labels(cfg[1].body) == ["Assign: count = 0"]


def test_brace_delta_ignores_literals():
    assert brace_delta('printf("{");') == 0
    assert brace_delta("if (c == '}') {") == 1
    assert brace_delta("} else {") == 0
