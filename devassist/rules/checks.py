"""Pure content checks: each takes file text and returns a RuleMatch or None.

These are keyword and regular-expression heuristics, not parsers; false
positives and negatives are expected.
"""

from __future__ import annotations

import re
from typing import Optional

from .base import ContentCheck, RuleMatch

_SQL_KEYWORD = r"\b(?:SELECT|INSERT|UPDATE|DELETE)\b"
_SQL_CONCATENATION = re.compile(
    rf"""(["'])[^"'\n]*{_SQL_KEYWORD}[^"'\n]*\1\s*\+"""
    rf"""|\+\s*(["'])[^"'\n]*{_SQL_KEYWORD}[^"'\n]*\2"""
    rf"""|\bf(["'])[^"'\n]*{_SQL_KEYWORD}[^"'\n]*\{{[^}}]+\}}[^"'\n]*\3"""
    rf"""|`[^`]*{_SQL_KEYWORD}[^`]*\$\{{[^`]*`"""
    rf"""|(["'])[^"'\n]*{_SQL_KEYWORD}[^"'\n]*\4\s*\.format\("""
)
_SQL_PARAMETERISED = re.compile(
    rf"""\b(?:prepare|bind_param|bindParam|bindValue)\s*\("""
    rf"""|{_SQL_KEYWORD}[^"'`\n]*(?:\?|%s|\$\d|:[A-Za-z_]\w*)"""
)

_REQUEST_INPUT = re.compile(
    r"\breq\.(?:body|params|query)\b"
    r"|\brequest\.(?:form|args|json|values|data|GET|POST|get_json\()"
    r"|\$_(?:GET|POST|REQUEST)\b"
)
_VALIDATION = re.compile(
    r"validat|sanitiz|escape|Joi\.|\bzod\b|\byup\b|BaseModel|Schema\(|filter_input|htmlspecialchars",
    re.IGNORECASE,
)

_MARKUP_OUTPUT = re.compile(
    r"\.innerHTML\s*=|\.outerHTML\s*=|dangerouslySetInnerHTML|document\.write\(|\bv-html\b"
    r"|\|\s*safe\b|\bmark_safe\(|\bMarkup\(|echo\s+\$_(?:GET|POST|REQUEST)"
)
_ESCAPING = re.compile(r"escape|sanitiz|DOMPurify|htmlspecialchars|bleach", re.IGNORECASE)

_SECRET_ASSIGNMENT = re.compile(
    r"""\b(?:password|passwd|pwd|secret|api[_-]?key|apikey|access[_-]?token|auth[_-]?token|private[_-]?key)\w*"""
    r"""["']?\s*[:=]\s*["']([^"'\s]{4,})["']""",
    re.IGNORECASE,
)
_AWS_ACCESS_KEY = re.compile(r"\bAKIA[0-9A-Z]{16}\b")
_PLACEHOLDER_VALUES = {"changeme", "password", "example", "xxxx", "your-api-key", "placeholder"}

_DYNAMIC_EXECUTION = re.compile(
    r"(?<![.\w])(?:eval|exec|system|shell_exec|passthru|popen)\s*\("
    r"|\bnew\s+Function\s*\("
    r"|\bos\.(?:system|popen)\s*\("
    r"|\bsubprocess\.\w+\([^)\n]*shell\s*=\s*True"
    r"|\bchild_process\b[^\n]*\bexec\("
)

_SYNC_FS = re.compile(
    r"\bfs\.(?:readFileSync|writeFileSync|appendFileSync|readdirSync|statSync|existsSync|mkdirSync)\s*\("
)
_HOT_PATH = re.compile(
    r"\b(?:app|router)\.(?:get|post|put|patch|delete|use|all)\s*\(|\basync\b|\bawait\b|createServer\("
)

_ASYNC = re.compile(r"\basync\b|\bawait\b")
_ERROR_HANDLING = re.compile(r"\btry\b[\s\S]*?\b(?:catch|except)\b|\.catch\(")

_FUNCTION_DECLARATION = re.compile(
    r"\bfunction\s+\w+"
    r"|\b(?:const|let|var)\s+\w+\s*=\s*(?:async\s*)?\([^)]*\)\s*=>"
    r"|^\s*(?:async\s+)?def\s+\w+",
    re.MULTILINE,
)
_BRANCH_KEYWORD = re.compile(r"\b(?:if|else|elif|for|while|switch|case|catch|except)\b|&&|\|\||\band\b|\bor\b")
FUNCTION_COMPLEXITY_LIMIT = 10


def _line_of(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def sql_injection(text: str) -> Optional[RuleMatch]:
    match = _SQL_CONCATENATION.search(text)
    if match is None or _SQL_PARAMETERISED.search(text):
        return None
    return RuleMatch(line=_line_of(text, match.start()))


def input_validation(text: str) -> Optional[RuleMatch]:
    match = _REQUEST_INPUT.search(text)
    if match is None or _VALIDATION.search(text):
        return None
    return RuleMatch(detail=match.group(0).rstrip("("), line=_line_of(text, match.start()))


def xss_prevention(text: str) -> Optional[RuleMatch]:
    match = _MARKUP_OUTPUT.search(text)
    if match is None or _ESCAPING.search(text):
        return None
    return RuleMatch(line=_line_of(text, match.start()))


def hardcoded_secret(text: str) -> Optional[RuleMatch]:
    for match in _SECRET_ASSIGNMENT.finditer(text):
        if match.group(1).lower() in _PLACEHOLDER_VALUES:
            continue
        return RuleMatch(line=_line_of(text, match.start()))
    match = _AWS_ACCESS_KEY.search(text)
    if match:
        return RuleMatch(detail="AWS access key id", line=_line_of(text, match.start()))
    return None


def code_injection(text: str) -> Optional[RuleMatch]:
    match = _DYNAMIC_EXECUTION.search(text)
    if match is None:
        return None
    return RuleMatch(detail=match.group(0).strip(), line=_line_of(text, match.start()))


def sync_io(text: str) -> Optional[RuleMatch]:
    match = _SYNC_FS.search(text)
    if match is None or not _HOT_PATH.search(text):
        return None
    return RuleMatch(detail=match.group(0).rstrip("( "), line=_line_of(text, match.start()))


def error_handling(text: str) -> Optional[RuleMatch]:
    match = _ASYNC.search(text)
    if match is None or _ERROR_HANDLING.search(text):
        return None
    return RuleMatch(line=_line_of(text, match.start()))


def function_complexity(text: str) -> Optional[RuleMatch]:
    functions = len(_FUNCTION_DECLARATION.findall(text))
    if not functions:
        return None
    average = len(_BRANCH_KEYWORD.findall(text)) / functions
    if average <= FUNCTION_COMPLEXITY_LIMIT:
        return None
    return RuleMatch(detail=f"average {average:.1f} branches per function")


def oversized_file(threshold: int) -> ContentCheck:
    def _check(text: str) -> Optional[RuleMatch]:
        lines = len(text.splitlines())
        if lines <= threshold:
            return None
        return RuleMatch(detail=f"{lines} lines (limit {threshold})", line=lines)

    return _check


__all__ = [
    "code_injection",
    "error_handling",
    "function_complexity",
    "hardcoded_secret",
    "input_validation",
    "oversized_file",
    "sql_injection",
    "sync_io",
    "xss_prevention",
]
