"""
Subject lookup tables: which topics have no coding round, and the starter
code shown for coding questions in each language or framework.
"""
from typing import Iterable, Optional, Tuple


NON_CODING_TOPICS = (
    "aws",
    "devops",
    "docker",
    "machine learning",
    "data science",
    "cybersecurity",
    "internet of things (iot)",
    "ar/vr development",
    "game development",
    "agile methodologies",
    "microservices architecture",
    "cloud computing",
    "big data technologies",
    "ui/ux design",
    "cross-platform development",
    "serverless architecture",
    "progressive web apps (pwas)",
)


_PYTHON = ("python", "def solution():\n    # Your code here\n    pass\n")
_JAVA = (
    "java",
    "public class Solution {\n"
    "    public static void main(String[] args) {\n"
    "        // Your code here\n"
    "    }\n"
    "}\n",
)
_JAVASCRIPT = ("javascript", "function solution() {\n    // Your code here\n}\n")
_CPP = (
    "cpp",
    "#include <iostream>\nusing namespace std;\nint main() {\n    // Your code here\n    return 0;\n}\n",
)
_CSHARP = (
    "csharp",
    "using System;\n"
    "class Solution {\n"
    "    static void Main(string[] args) {\n"
    "        // Your code here\n"
    "    }\n"
    "}\n",
)
_DART = ("dart", "void main() {\n    // Your code here\n}\n")
_RUBY = ("ruby", "# Your code here\n")
_PHP = ("php", "<?php\n// Your code here\n?>\n")
_GO = ("go", "package main\nimport \"fmt\"\nfunc main() {\n    // Your code here\n}\n")

# skill -> (fence language, starter code)
BOILERPLATE_CODE = {
    "python": _PYTHON,
    "django": _PYTHON,
    "fastapi": _PYTHON,
    "java": _JAVA,
    "java spring boot": _JAVA,
    "javascript": _JAVASCRIPT,
    "node.js express": _JAVASCRIPT,
    "react.js": _JAVASCRIPT,
    "angular": _JAVASCRIPT,
    "vue.js": _JAVASCRIPT,
    "svelte": _JAVASCRIPT,
    "c++": _CPP,
    "c# .net": _CSHARP,
    "asp.net core": _CSHARP,
    "swift": ("swift", "func solution() {\n    // Your code here\n}\n"),
    "kotlin": ("kotlin", "fun main() {\n    // Your code here\n}\n"),
    "flutter": _DART,
    "react native": _DART,
    "ruby": _RUBY,
    "ruby on rails": _RUBY,
    "php": _PHP,
    "laravel": _PHP,
    "go": _GO,
}


def _normalize(name: str) -> str:
    return name.strip().lower()


def is_non_coding(topic: str, skills: Iterable[str], denylist: Optional[Iterable[str]] = None) -> bool:
    """True when the topic or any skill exactly matches a denylisted subject."""
    blocked = {_normalize(t) for t in (denylist or NON_CODING_TOPICS)}
    if _normalize(topic) in blocked:
        return True
    return any(_normalize(skill) in blocked for skill in skills)


def get_boilerplate(skill: str) -> Tuple[str, str]:
    """(language, starter code) for a skill; empty strings when unknown."""
    return BOILERPLATE_CODE.get(_normalize(skill), ("", ""))


def get_boilerplate_code(skill: str) -> str:
    return get_boilerplate(skill)[1]
