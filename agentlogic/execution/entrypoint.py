import ast
import re
from typing import Optional

DEFAULT_PYTHON_ENTRYPOINT = "main"

_PY_DEF_PATTERN = re.compile(r"def\s+(\w+)")

# Priority order: named declaration, then const-assigned function expression
_JS_PATTERNS = (
    re.compile(r"function\s+(\w+)"),
    re.compile(r"const\s+(\w+)\s*="),
)


def detect_python_entrypoint(code: str, function_name: Optional[str] = None) -> str:
    """
    Resolve the Python function a test case should call.

    An explicit name always wins. Otherwise the source is parsed and the first
    top-level function definition is used. Source that does not parse falls
    back to a regex scan so the caller still gets a name; the syntax error
    itself is reported when the interpreter runs the code.
    """
    if function_name:
        return function_name

    try:
        tree = ast.parse(code)
    except SyntaxError:
        match = _PY_DEF_PATTERN.search(code)
        return match.group(1) if match else DEFAULT_PYTHON_ENTRYPOINT

    for node in tree.body:
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return node.name

    # e.g. a solution written as a class with methods
    for node in ast.walk(tree):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
            return node.name

    return DEFAULT_PYTHON_ENTRYPOINT


def detect_javascript_entrypoint(code: str, function_name: Optional[str] = None) -> Optional[str]:
    """Return the JavaScript function to call, or None to use the script's completion value."""
    if function_name:
        return function_name

    for pattern in _JS_PATTERNS:
        match = pattern.search(code)
        if match:
            return match.group(1)
    return None
