from typing import List
import logging
from dataclasses import dataclass

@dataclass(frozen=True)
class ValidationIssue:
    cloud_name: str
    code: str       # "MISSING_LAYER" | "LAYER_LENGTH_MISMATCH" | "NON_FINITE_VALUES" | "LABEL_OUT_OF_RANGE"
    severity: str   # "error" | "warning"
    message: str

def log_issues(issues: List[ValidationIssue], severity: str) -> bool:
    """Log every issue, returns True when any has the given severity."""
    for issue in issues:
        log = logging.error if issue.severity == severity else logging.warning
        log("❌ %s [%s]: %s", issue.cloud_name, issue.code, issue.message)
    return any(i.severity == severity for i in issues)
