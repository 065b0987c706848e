"""Data-integrity findings and exception types.

Engine components never raise for bad upstream data. They recover locally
and report what they recovered from as ``DataIssue`` records, so callers can
decide whether a partial result is acceptable.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IssueKind(str, Enum):
    """Categories of recoverable data defects."""

    MALFORMED_BRACKET_NODE = 'malformed_bracket_node'
    INCOMPLETE_WEEK_PAIRING = 'incomplete_week_pairing'
    TIED_SCORE = 'tied_score'
    EMPTY_BRACKET = 'empty_bracket'
    UNRESOLVABLE_PARTICIPANT = 'unresolvable_participant'
    CONFLICTING_PLACEMENT = 'conflicting_placement'
    DUPLICATE_MATCH = 'duplicate_match'
    DUPLICATE_PARTICIPANT = 'duplicate_participant'
    UNPLACED_PARTICIPANT = 'unplaced_participant'


@dataclass(frozen=True)
class DataIssue:
    """A single recovered data defect."""

    kind: IssueKind
    message: str
    context: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    @property
    def is_warning(self) -> bool:
        return self.kind is not IssueKind.EMPTY_BRACKET

    def __str__(self) -> str:
        return f'[{self.kind.value}] {self.message}'


def issues_of_kind(issues: list[DataIssue], kind: IssueKind) -> list[DataIssue]:
    """Filter a list of issues down to one kind."""
    return [issue for issue in issues if issue.kind is kind]


class FFUError(Exception):
    """Base class for errors raised by the ffu package."""


class ConfigError(FFUError, ValueError):
    """League configuration is missing or inconsistent."""
