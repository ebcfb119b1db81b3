"""Read-only view of a finished analysis, as consumed by the decorator.

The analysis engine, blame computation and comment rendering live outside this
package; they are reached through the ``BlameLookup`` and ``CommentFormatter``
protocols.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

NEW_COVERAGE_METRIC = "new_coverage"


class QualityGateStatus(str, Enum):
    OK = "OK"
    ERROR = "ERROR"


class EvaluationStatus(str, Enum):
    OK = "OK"
    WARN = "WARN"
    ERROR = "ERROR"
    NO_VALUE = "NO_VALUE"


class IssueStatus(str, Enum):
    OPEN = "OPEN"
    CONFIRMED = "CONFIRMED"
    REOPENED = "REOPENED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    TO_REVIEW = "TO_REVIEW"
    IN_REVIEW = "IN_REVIEW"
    REVIEWED = "REVIEWED"


CLOSED_ISSUE_STATUSES = frozenset({IssueStatus.CLOSED, IssueStatus.RESOLVED})


@dataclass(frozen=True)
class Condition:
    metric_key: str
    status: EvaluationStatus
    value: str | None = None


@dataclass(frozen=True)
class Component:
    key: str
    scm_path: str | None = None


@dataclass(frozen=True)
class ComponentIssue:
    component: Component
    key: str = ""
    line: int | None = None
    status: IssueStatus = IssueStatus.OPEN
    message: str = ""
    severity: str = ""
    rule: str = ""

    @property
    def is_open(self) -> bool:
        return self.status not in CLOSED_ISSUE_STATUSES


class BlameLookup(Protocol):
    def revision_for_line(self, component_key: str, line: int) -> str | None:
        """Revision that last touched ``line``, or ``None`` when no changeset is recorded."""


class CommentFormatter(Protocol):
    def summary(self, analysis: AnalysisDetails) -> str: ...

    def issue_summary(self, analysis: AnalysisDetails, issue: ComponentIssue) -> str: ...


@dataclass(frozen=True)
class AnalysisDetails:
    commit_sha: str
    pull_request_id: str
    project_key: str
    quality_gate_status: QualityGateStatus
    blame: BlameLookup
    formatter: CommentFormatter
    scanner_properties: Mapping[str, str] = field(default_factory=dict)
    conditions: Sequence[Condition] = ()
    issues: Sequence[ComponentIssue] = ()

    def find_condition(self, metric_key: str) -> Condition | None:
        for condition in self.conditions:
            if condition.metric_key == metric_key:
                return condition
        return None

    def scm_path_for(self, issue: ComponentIssue) -> str | None:
        return issue.component.scm_path

    def create_summary(self) -> str:
        return self.formatter.summary(self)

    def create_issue_summary(self, issue: ComponentIssue) -> str:
        return self.formatter.issue_summary(self, issue)
