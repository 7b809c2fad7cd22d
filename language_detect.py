# language_detect.py
import logging
import os
import re

logger = logging.getLogger(__name__)

EXTENSION_LANGUAGES = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "py": "python",
    "rb": "ruby",
    "go": "go",
    "java": "java",
    "rs": "rust",
    "cs": "csharp",
    "c": "c",
    "h": "c",
    "cpp": "cpp",
    "cc": "cpp",
    "cxx": "cpp",
    "hpp": "cpp",
    "php": "php",
    "swift": "swift",
    "kt": "kotlin",
}

# checked in order; C markers before the JS ones so `#include` files never fall through
CONTENT_RULES = [
    (re.compile(r"#include\s*[<\"]"), "c"),
    (re.compile(r"^\s*int\s+main\s*\(", re.M), "c"),
    (re.compile(r"cout\s*<<|cin\s*>>|std::"), "cpp"),
    (re.compile(r"^public\s+class\s+\w+", re.M), "java"),
    (re.compile(r"^\s*def\s+\w+\s*\(", re.M), "python"),
    (re.compile(r"require\s*\(|import\s+\w+\s+from"), "javascript"),
]

# languages with markers strong enough to override a caller's hint
UNMISTAKABLE = ("c", "cpp", "python")

DIALECTS = {
    "c": "systems",
    "cpp": "systems",
    "python": "indentation",
}


def detect_language(file_path: str = "", code: str = "") -> str:
    ext = os.path.splitext(file_path or "")[1].lstrip(".").lower()
    if ext in EXTENSION_LANGUAGES:
        return EXTENSION_LANGUAGES[ext]
    for pattern, language in CONTENT_RULES:
        if pattern.search(code or ""):
            return language
    return "javascript"


def resolve_language(code: str, file_path: str = "", hint: str = "") -> str:
    """
    Language to analyze `code` as. A hint wins unless it names a brace-family
    language while the file clearly is C, C++ or Python.
    """
    if not hint:
        return detect_language(file_path, code)
    if hint in UNMISTAKABLE:
        return hint
    detected = detect_language(file_path, code)
    if detected in UNMISTAKABLE:
        logger.debug("hint %r overridden by detected language %r", hint, detected)
        return detected
    return hint


def dialect_for(language: str) -> str:
    """systems (C/C++), indentation (Python) or brace (everything else)."""
    return DIALECTS.get(language, "brace")
