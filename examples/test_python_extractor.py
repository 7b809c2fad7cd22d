import sys, os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cfg_nodes import Decision, Loop, Sequential, TryCatch
from python_extractor import analyze_python, python_has_structure

code = """
import os
from pathlib import Path

def main():
    name = input("Your name: ")
    if name:
        print("Hello")
    for i in range(3):
        print(i)
    try:
        open("out.txt", "w")
    except IOError:
        raise ValueError("bad")
    return name
"""


def test_nodes_in_encounter_order():
    nodes = analyze_python(code)
    assert nodes == [
        Sequential("io", "Input: Your name: "),
        Decision("name"),
        Sequential("output", "Print: Hello"),
        Loop("For i in range(3)", "for-in"),
        Sequential("output", "Print: i"),
        TryCatch(),
        Sequential("io", "Open file: out.txt (w)"),
        Sequential("throw", "Raise ValueError"),
        Sequential("return", "Return name"),
    ]


def test_structural_nodes_are_shallow():
    nodes = analyze_python("while queue:\n    item = queue.pop()\n    print(item)\n")
    loop = nodes[0]
    assert loop.label == "While: queue"
    assert loop.body == []


def test_consecutive_duplicates_collapse():
    nodes = analyze_python("print('x')\nprint('x')\nprint('y')\n")
    assert [n.label for n in nodes] == ["Print: x", "Print: y"]


def test_requests_and_comments():
    nodes = analyze_python("# fetch the data\nresp = requests.get('https://example.com/api')\n")
    assert nodes == [Sequential("io", "GET https://example.com/api")]


def test_has_structure():
    assert python_has_structure(analyze_python("if x:\n    pass\n"))
    assert not python_has_structure(analyze_python("try:\n    pass\nexcept Exception:\n    pass\n"))
    assert not python_has_structure([])
