"""Lexical metric evaluators: one pure function per MetricKind.

Every evaluator extracts two or three raw signals from the code text,
normalizes each signal into [0, 1] against a fixed saturation threshold
and combines them with a fixed weighted sum. Weights sum to 1.0, so the
result is already in [0, 1]; it is clamped anyway before it leaves the
evaluator.

Tuning constants (stable; changing any of them changes every score):

=============  ======================================  =========  ======
metric         signal                                  threshold  weight
=============  ======================================  =========  ======
impact         call sites ``name(``                    10         0.50
               control structures ``if/for/while(``    10         0.50
simplicity     average non-blank line length           40..80     1/3
               maximum ``{}`` nesting depth            5          1/3
               operator-symbol density (ideal 0.10)    +-0.10     1/3
cleanness      consistent indentation                  flag       0.50
               consistent brace placement              flag       0.30
               blank-line ratio (ideal 0.20)           +-0.20     0.20
comment        comment-line density (ideal 0.30)       +-0.30     0.60
               words per comment                       8          0.40
creditability  test markers                            5          0.40
               documentation tags ``@param`` ...        10         0.40
               external references (URL / RFC ...)     2          0.20
novelty        advanced language features              3          0.40
               design-pattern names                    2          0.40
               complexity annotations ``O(...)``       1          0.20
=============  ======================================  =========  ======

The evaluators are heuristics over text, not parsers. None of them reads
the clock, randomness or the filesystem, so a fragment always scores the
same.
"""

from __future__ import annotations

import re
from typing import Callable

from credit_ledger.models.metric import MetricEvaluation, MetricKind

Evaluator = Callable[[str], MetricEvaluation]

IMPACT_CALL_SATURATION = 10
IMPACT_CONTROL_SATURATION = 10
IMPACT_WEIGHTS = (0.5, 0.5)

SIMPLICITY_IDEAL_LINE_LENGTH = 40.0
SIMPLICITY_LINE_LENGTH_SPAN = 40.0
SIMPLICITY_NESTING_SATURATION = 5
SIMPLICITY_IDEAL_SYMBOL_DENSITY = 0.1
SIMPLICITY_WEIGHTS = (1 / 3, 1 / 3, 1 / 3)

CLEANNESS_IDEAL_BLANK_RATIO = 0.2
CLEANNESS_INCONSISTENT_BRACE_SCORE = 0.5
CLEANNESS_WEIGHTS = (0.5, 0.3, 0.2)

COMMENT_IDEAL_DENSITY = 0.3
COMMENT_WORDS_SATURATION = 8
COMMENT_WEIGHTS = (0.6, 0.4)

CREDITABILITY_TEST_SATURATION = 5
CREDITABILITY_DOC_SATURATION = 10
CREDITABILITY_REF_SATURATION = 2
CREDITABILITY_WEIGHTS = (0.4, 0.4, 0.2)

NOVELTY_ADVANCED_SATURATION = 3
NOVELTY_PATTERN_SATURATION = 2
NOVELTY_COMPLEXITY_SATURATION = 1
NOVELTY_WEIGHTS = (0.4, 0.4, 0.2)

_CALL_RE = re.compile(r"\b\w+\s*\(")
_CONTROL_RE = re.compile(r"\b(?:if|for|while|switch)\s*\(")
_SYMBOLS = frozenset("+-*/=<>!&|^~%?:;[](){}")
_SAME_LINE_BRACE_RE = re.compile(r"\)[ \t]*\{")
_NEXT_LINE_BRACE_RE = re.compile(r"\)[ \t]*\r?\n[ \t]*\{")
_HASH_COMMENT_RE = re.compile(r"^\s*#(?:\s|#|$)")
_TEST_RE = re.compile(r"\b(?:test|assert|expect|should|mock|stub|spy)\b")
_DOC_RE = re.compile(r"@(?:param|return|throws?|see|link|since|version|author|deprecated)")
_REF_RE = re.compile(r"https?://[^\s\"'<>]+|\b(?:RFC|IEEE|ISO)[- ][0-9]+")
_ADVANCED_RE = re.compile(
    r"\b(?:template|constexpr|decltype|concept|requires|noexcept|auto|lambda|fold"
    r"|structured\s+binding|yield|async|await)\b"
)
_PATTERN_RE = re.compile(
    r"\b(?:Factory|Builder|Singleton|Adapter|Bridge|Composite|Decorator|Facade|Proxy"
    r"|Observer|Strategy|Command|State|Visitor|Interpreter|Iterator|Mediator|Memento|Prototype)\b"
)
_COMPLEXITY_RE = re.compile(r"O\([^)]*\)")

DESCRIPTIONS: dict[MetricKind, str] = {
    MetricKind.IMPACT: "Measures the gravity effect towards a particular line in the overall function of the program.",
    MetricKind.SIMPLICITY: "Measures purity of syntactic, semantic, and pragmatic quality to be easily digested by programmers.",
    MetricKind.CLEANNESS: "Measures proper formatting and subsymbolic and symbolic notation.",
    MetricKind.COMMENT: "Measures quality of non-opinionated statements with no syntactic sugar.",
    MetricKind.CREDITABILITY: "Measures evidence that technique is compatible with architecture requirements.",
    MetricKind.NOVELTY: "Measures creative and exotic approach to problem-solving.",
}


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _saturate(count: float, threshold: float) -> float:
    return _clamp(count / threshold)


def _closeness(actual: float, ideal: float, tolerance: float) -> float:
    """1.0 at ``ideal``, falling linearly to 0.0 at ``ideal +- tolerance``."""
    return _clamp(1.0 - abs(actual - ideal) / tolerance)


def _weighted(scores: tuple[float, ...], weights: tuple[float, ...]) -> float:
    return _clamp(sum(score * weight for score, weight in zip(scores, weights)))


def _lines(code: str) -> list[str]:
    lines = code.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def _is_blank(line: str) -> bool:
    return not line.strip(" \t\r\n")


def evaluate_impact(code: str) -> MetricEvaluation:
    calls = len(_CALL_RE.findall(code))
    controls = len(_CONTROL_RE.findall(code))
    value = _weighted(
        (
            _saturate(calls, IMPACT_CALL_SATURATION),
            _saturate(controls, IMPACT_CONTROL_SATURATION),
        ),
        IMPACT_WEIGHTS,
    )
    return MetricEvaluation(
        kind=MetricKind.IMPACT,
        value=value,
        rationale=f"Impact score based on {calls} function calls and {controls} control structures.",
    )


def evaluate_simplicity(code: str) -> MetricEvaluation:
    code_lines = [line for line in _lines(code) if not _is_blank(line)]
    average_length = (sum(len(line) for line in code_lines) / len(code_lines)) if code_lines else 0.0

    depth = 0
    max_depth = 0
    for line in code_lines:
        for char in line:
            if char == "{":
                depth += 1
                max_depth = max(max_depth, depth)
            elif char == "}":
                depth = max(0, depth - 1)

    symbols = sum(1 for char in code if char in _SYMBOLS)
    density = symbols / len(code) if code else 0.0

    line_score = _clamp(1.0 - (average_length - SIMPLICITY_IDEAL_LINE_LENGTH) / SIMPLICITY_LINE_LENGTH_SPAN)
    nesting_score = _clamp(1.0 - max_depth / SIMPLICITY_NESTING_SATURATION)
    symbol_score = _closeness(density, SIMPLICITY_IDEAL_SYMBOL_DENSITY, SIMPLICITY_IDEAL_SYMBOL_DENSITY)
    value = _weighted((line_score, nesting_score, symbol_score), SIMPLICITY_WEIGHTS)
    return MetricEvaluation(
        kind=MetricKind.SIMPLICITY,
        value=value,
        rationale=(
            f"Simplicity score based on average line length ({average_length:.2f} chars), "
            f"nesting depth ({max_depth}), and symbol density ({density:.3f})."
        ),
    )


def evaluate_cleanness(code: str) -> MetricEvaluation:
    lines = _lines(code)
    blank_lines = 0
    inconsistent_indent = False
    previous_indent = ""

    for line in lines:
        if _is_blank(line):
            blank_lines += 1
            continue
        indent = line[: len(line) - len(line.lstrip(" \t"))]
        if " " in indent and "\t" in indent:
            inconsistent_indent = True
        if indent and previous_indent and indent[0] != previous_indent[0]:
            inconsistent_indent = True
        previous_indent = indent

    same_line = len(_SAME_LINE_BRACE_RE.findall(code))
    next_line = len(_NEXT_LINE_BRACE_RE.findall(code))
    consistent_braces = (same_line == 0 or next_line == 0) and (same_line + next_line) > 0

    blank_ratio = blank_lines / len(lines) if lines else 0.0
    indent_score = 0.0 if inconsistent_indent else 1.0
    brace_score = 1.0 if consistent_braces else CLEANNESS_INCONSISTENT_BRACE_SCORE
    whitespace_score = _closeness(blank_ratio, CLEANNESS_IDEAL_BLANK_RATIO, CLEANNESS_IDEAL_BLANK_RATIO)
    value = _weighted((indent_score, brace_score, whitespace_score), CLEANNESS_WEIGHTS)
    return MetricEvaluation(
        kind=MetricKind.CLEANNESS,
        value=value,
        rationale=(
            f"Cleanness score based on indentation consistency ({'inconsistent' if inconsistent_indent else 'consistent'}), "
            f"brace style ({same_line} same-line, {next_line} next-line), "
            f"and whitespace usage ({blank_lines} of {len(lines)} lines blank)."
        ),
    )


def _comment_lines(lines: list[str]) -> tuple[int, list[str]]:
    count = 0
    comments: list[str] = []
    in_block = False
    for line in lines:
        if _is_blank(line):
            continue
        start = line.find("/*")
        if in_block:
            count += 1
            comments.append(line)
            if "*/" in line:
                in_block = False
        elif start != -1:
            count += 1
            comments.append(line[start:])
            in_block = line.find("*/", start + 2) == -1
        elif "//" in line:
            count += 1
            comments.append(line[line.find("//") + 2 :])
        elif _HASH_COMMENT_RE.match(line):
            count += 1
            comments.append(line.lstrip(" \t")[1:])
    return count, comments


def evaluate_comment(code: str) -> MetricEvaluation:
    lines = _lines(code)
    comment_count, comments = _comment_lines(lines)
    density = comment_count / len(lines) if lines else 0.0
    words = sum(len(comment.split()) for comment in comments)
    average_words = words / len(comments) if comments else 0.0

    density_score = _closeness(density, COMMENT_IDEAL_DENSITY, COMMENT_IDEAL_DENSITY)
    length_score = _saturate(average_words, COMMENT_WORDS_SATURATION)
    value = _weighted((density_score, length_score), COMMENT_WEIGHTS)
    return MetricEvaluation(
        kind=MetricKind.COMMENT,
        value=value,
        rationale=(
            f"Comment score based on density ({density * 100:.1f}% of {len(lines)} lines) "
            f"and average length ({average_words:.2f} words)."
        ),
    )


def evaluate_creditability(code: str) -> MetricEvaluation:
    tests = len(_TEST_RE.findall(code))
    docs = len(_DOC_RE.findall(code))
    refs = len(_REF_RE.findall(code))
    value = _weighted(
        (
            _saturate(tests, CREDITABILITY_TEST_SATURATION),
            _saturate(docs, CREDITABILITY_DOC_SATURATION),
            _saturate(refs, CREDITABILITY_REF_SATURATION),
        ),
        CREDITABILITY_WEIGHTS,
    )
    return MetricEvaluation(
        kind=MetricKind.CREDITABILITY,
        value=value,
        rationale=(
            f"Creditability score based on evidence of testing ({tests}), "
            f"documentation ({docs}), and references ({refs})."
        ),
    )


def evaluate_novelty(code: str) -> MetricEvaluation:
    advanced = len(_ADVANCED_RE.findall(code))
    patterns = len(_PATTERN_RE.findall(code))
    complexity = len(_COMPLEXITY_RE.findall(code))
    value = _weighted(
        (
            _saturate(advanced, NOVELTY_ADVANCED_SATURATION),
            _saturate(patterns, NOVELTY_PATTERN_SATURATION),
            _saturate(complexity, NOVELTY_COMPLEXITY_SATURATION),
        ),
        NOVELTY_WEIGHTS,
    )
    return MetricEvaluation(
        kind=MetricKind.NOVELTY,
        value=value,
        rationale=(
            f"Novelty score based on advanced language features ({advanced}), "
            f"design patterns ({patterns}), and algorithm analysis ({complexity})."
        ),
    )


EVALUATORS: dict[MetricKind, Evaluator] = {
    MetricKind.IMPACT: evaluate_impact,
    MetricKind.SIMPLICITY: evaluate_simplicity,
    MetricKind.CLEANNESS: evaluate_cleanness,
    MetricKind.COMMENT: evaluate_comment,
    MetricKind.CREDITABILITY: evaluate_creditability,
    MetricKind.NOVELTY: evaluate_novelty,
}


def evaluator_for(kind: MetricKind) -> Evaluator:
    return EVALUATORS[MetricKind(kind)]


def all_evaluators() -> list[Evaluator]:
    """All six evaluators in MetricKind order."""
    return [EVALUATORS[kind] for kind in MetricKind]


def describe(kind: MetricKind) -> str:
    return DESCRIPTIONS[MetricKind(kind)]
