import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from block_parser import classify_owner, parse_blocks
from lexer import tokenize


def owner_of(header):
    return classify_owner(tokenize(header))


def child_kinds(block):
    return [c.owner.kind for c in block.children]


def test_if_else_blocks():
    root = parse_blocks(tokenize("if (a > 1) { x(); } else { y(); }"))
    assert child_kinds(root) == ["if", "else"]
    assert root.children[0].owner.label == "a > 1"


def test_else_on_its_own_line():
    root = parse_blocks(tokenize("if (a) {\n  x();\n}\nelse {\n  y();\n}"))
    assert child_kinds(root) == ["if", "else"]


def test_else_if_kind():
    root = parse_blocks(tokenize("if (a) { } else if (b) { } else { }"))
    assert child_kinds(root) == ["if", "else-if", "else"]
    assert root.children[1].owner.label == "b"


def test_for_header_semicolons_do_not_split():
    owner = owner_of("for (let i = 0; i < n; i++)")
    assert owner.kind == "for"
    assert owner.label.startswith("For: let i = 0 ; i < n")


def test_loop_owners():
    assert owner_of("for (const item of items)").kind == "for-of"
    assert owner_of("for (const item of items)").label == "For each in items"
    assert owner_of("for (const k in obj)").kind == "for-in"
    assert owner_of("while (running)").label == "While: running"
    assert owner_of("do").kind == "do-while"
    assert owner_of("items.forEach((item) =>").kind == "iterator"


def test_event_owner_has_subject_and_event():
    owner = owner_of("server.on('connection', (socket) =>")
    assert owner.kind == "on-event"
    assert owner.meta == {"obj": "server", "event": "connection"}
    assert owner.label == "server.on('connection')"


def test_promise_catch_is_not_a_try_catch():
    assert owner_of("fetch(url).then((res) =>").kind == "then"
    assert owner_of("p.catch((err) =>").kind == "promise-catch"
    assert owner_of("p.finally(() =>").kind == "promise-finally"
    catch = owner_of("catch (err)")
    assert catch.kind == "catch"
    assert catch.meta["param"] == "err"


def test_function_method_and_class_owners():
    assert owner_of("function load(path)").label == "function load()"
    assert owner_of("async run(x)").label == "run()"
    assert owner_of("const handler = (req, res) =>").label == "handler = () =>"
    assert owner_of("class Service extends Base").label == "class Service"
    assert owner_of("setTimeout(function ()").kind == "arrow"
    assert owner_of("const config =").kind == "object"


def test_header_is_the_last_statement_only():
    owner = owner_of("doWork();\nif (ready)")
    assert owner.kind == "if"
    assert owner.label == "ready"


def test_brace_on_next_line_keeps_header():
    root = parse_blocks(tokenize("while (busy)\n{\n  wait();\n}"))
    assert child_kinds(root) == ["while"]


def test_parent_tokens_trimmed_to_last_statement():
    root = parse_blocks(tokenize("init();\nif (ok) { go(); }"))
    values = [t.value for t in root.tokens if t.value != "\n"]
    assert values == ["init", "(", ")", ";"]


def test_stray_closing_brace_is_ignored():
    root = parse_blocks(tokenize("a();\n}\nif (x) { b(); }"))
    assert root.owner.kind == "root"
    assert child_kinds(root) == ["if"]


def test_unclosed_blocks_stay_open():
    root = parse_blocks(tokenize("function f() {\n  if (x) {\n    y();"))
    assert child_kinds(root) == ["function"]
    assert child_kinds(root.children[0]) == ["if"]


def test_block_lines():
    root = parse_blocks(tokenize("if (a) {\n  x();\n}\n"))
    child = root.children[0]
    assert (child.start_line, child.end_line) == (1, 3)


def test_keywords_inside_strings_do_not_classify():
    route = owner_of("app.get('/if', (req, res) =>")
    assert route.kind == "arrow"
    assert route.label == "callback"
    assert owner_of("fetch('/while/items').then((res) =>").kind == "then"
    assert owner_of("log(`for ${x} of ${y}`, () =>").kind == "arrow"
    assert owner_of("socket.on('switch', () =>").label == "socket.on('switch')"
