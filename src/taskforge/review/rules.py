"""Rule-based scoring of a pull request.

Each category starts at 100 and loses fixed penalties. The total is the
weighted sum of the clamped category scores, rounded half up.
"""

import logging
import re
from pathlib import PurePosixPath

from taskforge.github.models import ChangeRequest
from taskforge.review.models import (
    CATEGORIES,
    ApprovalCriteria,
    CategoryScore,
    PREvaluation,
)


logger = logging.getLogger(__name__)

# Weights in percent; they sum to 100
WEIGHTS = {
    "file_changes": 15,
    "code_quality": 25,
    "security": 30,
    "test_coverage": 20,
    "ci_checks": 10,
}

DEBUG_STATEMENTS = ("console.log", "console.error", "debugger;", "pdb.set_trace", "breakpoint()")
SECRET_PATTERNS = ("api[_-]?key", "secret", "password", "token", "credential")
DANGEROUS_CALLS = ("eval(", "dangerouslysetinnerhtml")
SOURCE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".py")
TYPED_EXTENSIONS = (".ts", ".tsx")
FAILED_CONCLUSIONS = ("failure", "cancelled")
MAX_ANY_COUNT = 3

_TODO = re.compile(r"\b(?:todo|fixme)\b")
_TRY = re.compile(r"\btry\b")
_CATCH = re.compile(r"\b(?:catch|except)\b")
_ANY = re.compile(r"\bany\b")
_ADDED_DEPENDENCY = re.compile(r'^\+.*".*":\s*".*"', re.MULTILINE)
_SECRETS = [(p, re.compile(p, re.IGNORECASE)) for p in SECRET_PATTERNS]


def is_test_file(path: str) -> bool:
    lowered = path.lower()
    return "test" in lowered or "spec" in lowered


def is_source_file(path: str) -> bool:
    return path.lower().endswith(SOURCE_EXTENSIONS) and not is_test_file(path)


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding .5 up, for non-negative numerators."""
    return (2 * numerator + denominator) // (2 * denominator)


def evaluate_file_changes(cr: ChangeRequest, criteria: ApprovalCriteria) -> CategoryScore:
    result = CategoryScore()

    if len(cr.files) > criteria.max_files_changed:
        result.penalize(
            20,
            f"Too many files changed: {len(cr.files)} (max: {criteria.max_files_changed})",
        )

    if cr.lines_changed > criteria.max_lines_changed:
        result.penalize(
            15,
            f"Too many lines changed: {cr.lines_changed} (max: {criteria.max_lines_changed})",
        )

    restricted = [
        f.path for f in cr.files if any(r in f.path for r in criteria.restricted_paths)
    ]
    if restricted:
        result.penalize(
            25,
            f"Restricted files modified: {', '.join(restricted)}",
            "Restricted file changes require manual review",
        )

    binary = [f for f in cr.files if f.patch is None]
    if binary:
        result.penalize(10, f"Binary files changed: {len(binary)}")

    return result


def evaluate_code_quality(cr: ChangeRequest, criteria: ApprovalCriteria) -> CategoryScore:
    result = CategoryScore()
    diff = cr.diff.lower()

    if any(statement in diff for statement in DEBUG_STATEMENTS):
        result.penalize(
            10,
            "Debug statements found (console.log/error)",
            "Remove debug statements before merging",
        )

    if _TODO.search(diff):
        result.penalize(5, "TODO/FIXME comments found")

    if _TRY.search(diff) and not _CATCH.search(diff):
        result.penalize(15, "Try blocks without catch found", "Add proper error handling")

    has_typed = any(f.path.endswith(TYPED_EXTENSIONS) for f in cr.files)
    if has_typed and len(_ANY.findall(diff)) > MAX_ANY_COUNT:
        result.penalize(
            10,
            'Excessive use of "any" type',
            'Use proper TypeScript types instead of "any"',
        )

    return result


def evaluate_security(cr: ChangeRequest, criteria: ApprovalCriteria) -> CategoryScore:
    result = CategoryScore()

    for source, pattern in _SECRETS:
        if pattern.search(cr.diff):
            result.penalize(
                30,
                f"Potential secret in code: {source}",
                "Use environment variables for secrets",
            )

    diff = cr.diff.lower()
    if any(call in diff for call in DANGEROUS_CALLS):
        result.penalize(
            25,
            "Dangerous functions detected (eval, dangerouslySetInnerHTML)",
            "Review security implications of dangerous functions",
        )

    manifest = next(
        (f for f in cr.files if PurePosixPath(f.path).name == "package.json"), None
    )
    if manifest is not None and manifest.patch:
        added = _ADDED_DEPENDENCY.findall(manifest.patch)
        if added:
            result.penalize(
                5,
                f"New dependencies added: {len(added)}",
                "Review new dependencies for security vulnerabilities",
            )

    return result


def evaluate_test_coverage(cr: ChangeRequest, criteria: ApprovalCriteria) -> CategoryScore:
    result = CategoryScore()
    test_files = [f for f in cr.files if is_test_file(f.path)]
    source_files = [f for f in cr.files if is_source_file(f.path)]

    if source_files and not test_files:
        result.penalize(
            30,
            "No test files included with source changes",
            "Add tests for new functionality",
        )

    if test_files and source_files and len(test_files) / len(source_files) < 0.5:
        result.penalize(
            15,
            "Low test-to-source file ratio",
            "Consider adding more comprehensive tests",
        )

    return result


def evaluate_ci_checks(cr: ChangeRequest, criteria: ApprovalCriteria) -> CategoryScore:
    result = CategoryScore()

    if not cr.checks:
        result.penalize(40, "No CI checks found", "Set up continuous integration checks")
        return result

    names = [check.name.lower() for check in cr.checks]
    for required in criteria.required_checks:
        if not any(required in name for name in names):
            result.penalize(15, f"Missing required check: {required}")

    failed = [c.name for c in cr.checks if c.conclusion in FAILED_CONCLUSIONS]
    if failed:
        result.penalize(
            30,
            f"Failed checks: {', '.join(failed)}",
            "Fix failing CI checks before approval",
        )

    return result


SCORERS = {
    "file_changes": evaluate_file_changes,
    "code_quality": evaluate_code_quality,
    "security": evaluate_security,
    "test_coverage": evaluate_test_coverage,
    "ci_checks": evaluate_ci_checks,
}


def calculate_total_score(scores: dict[str, CategoryScore]) -> int:
    weighted = sum(WEIGHTS[category] * scores[category].score for category in CATEGORIES)
    return round_half_up(weighted, 100)


def evaluate_change_request(
    cr: ChangeRequest,
    criteria: ApprovalCriteria | None = None,
) -> PREvaluation:
    """Score a pull request against the approval criteria.

    Args:
        cr: Pull request files, diff and checks
        criteria: Policy to apply, defaults to ``ApprovalCriteria()``

    Returns:
        PREvaluation with per-category scores and flattened issues
    """
    criteria = criteria or ApprovalCriteria()
    scores = {
        category: SCORERS[category](cr, criteria).clamp() for category in CATEGORIES
    }

    for category, score in scores.items():
        logger.info(f"PR #{cr.number} {category}: {score.score}/100")

    evaluation = PREvaluation(
        scores=scores,
        total_score=calculate_total_score(scores),
        issues=[issue for s in scores.values() for issue in s.issues],
        recommendations=[rec for s in scores.values() for rec in s.recommendations],
    )
    logger.info(f"PR #{cr.number} total score: {evaluation.total_score}/100")
    return evaluation
