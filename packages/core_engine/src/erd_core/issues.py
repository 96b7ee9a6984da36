"""Advisory findings reported by schema validation and lint."""

from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List

SEVERITIES = ("error", "warn")


@dataclass(frozen=True)
class Issue:
    severity: str
    code: str
    message: str
    path: str = "/"

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.severity == "error" for issue in issues)


def severity_counts(issues: Iterable[Issue]) -> Dict[str, int]:
    counts = Counter(issue.severity for issue in issues)
    return {severity: counts.get(severity, 0) for severity in SEVERITIES}


def to_lines(issues: Iterable[Issue]) -> List[str]:
    return [f"[{issue.severity.upper()}] {issue.code} {issue.path}: {issue.message}" for issue in issues]
