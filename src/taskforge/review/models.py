"""Data models for pull request evaluation."""

from dataclasses import asdict, dataclass, field


# Category keys in weighting and reporting order
CATEGORIES = ("file_changes", "code_quality", "security", "test_coverage", "ci_checks")


@dataclass
class ApprovalCriteria:
    """Fixed policy the evaluator scores against."""

    max_files_changed: int = 10
    max_lines_changed: int = 500
    required_checks: tuple[str, ...] = ("build", "test", "lint")
    restricted_paths: tuple[str, ...] = (".github/workflows", "package.json", "tsconfig.json")
    approval_score_threshold: int = 75
    auto_merge_confidence: int = 90
    blocking_keywords: tuple[str, ...] = ("Restricted", "secret", "Failed checks")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CategoryScore:
    """Score of one evaluation category. Starts at 100."""

    score: int = 100
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def penalize(self, points: int, issue: str, recommendation: str | None = None) -> None:
        self.score -= points
        self.issues.append(issue)
        if recommendation:
            self.recommendations.append(recommendation)

    def clamp(self) -> "CategoryScore":
        self.score = max(0, min(100, self.score))
        return self


@dataclass
class PREvaluation:
    """Scored assessment of a pull request."""

    scores: dict[str, CategoryScore]
    total_score: int
    issues: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ApprovalDecision:
    """Approve or request changes, derived from an evaluation."""

    approved: bool
    confidence: int
    reasoning: list[str] = field(default_factory=list)
    required_actions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
