# patterns.py
"""
Ordered statement-shape tables.

Every dialect describes its atomic statements as a list of StatementPattern
entries; the first entry whose regex matches decides the outcome. A `skip`
entry matches but yields nothing (imports, directives), which also stops the
search.
"""
import re
from typing import Callable, Iterable, Optional

from cfg_nodes import Sequential

MatchLabel = Callable[["re.Match"], str]


class StatementPattern:
    def __init__(self, regex: str, kind: str = "process", label: Optional[MatchLabel] = None,
                 skip: bool = False, flags: int = 0):
        self.regex = re.compile(regex, flags)
        self.kind = kind
        self.label = label
        self.skip = skip

    def __repr__(self):
        return f"<StatementPattern {self.kind}:{self.regex.pattern!r}>"


def skip(regex: str, flags: int = 0) -> StatementPattern:
    return StatementPattern(regex, skip=True, flags=flags)


def match_statement(text: str, table: Iterable[StatementPattern], max_len: int = 50) -> Optional[Sequential]:
    """Classify one statement against an ordered table. None when nothing applies."""
    for pattern in table:
        m = pattern.regex.search(text)
        if not m:
            continue
        if pattern.skip:
            return None
        label = pattern.label(m)[:max_len]
        if not label:
            return None
        return Sequential(pattern.kind, label)
    return None
