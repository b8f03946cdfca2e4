import logging
from collections import Counter


class CountingHandler(logging.Handler):
    """Counts warnings and errors emitted while attached, for the end-of-run summary line."""

    def __init__(self, level: int = logging.WARNING):
        super().__init__(level)
        self.counts: Counter = Counter()

    def emit(self, record):
        self.counts["errors" if record.levelno >= logging.ERROR else "warnings"] += 1

    @property
    def warnings(self) -> int:
        return self.counts["warnings"]

    @property
    def errors(self) -> int:
        return self.counts["errors"]

    def summary(self) -> str:
        return f"Warnings: {self.warnings}, Errors: {self.errors}"
