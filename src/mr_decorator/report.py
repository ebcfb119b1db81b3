"""Analysis report files.

A report is the JSON hand-off from the analysis pipeline: quality gate, open
issues with their blamed revision, and comment bodies already rendered as
markdown.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .analysis import (
    AnalysisDetails,
    Component,
    ComponentIssue,
    Condition,
    EvaluationStatus,
    IssueStatus,
    QualityGateStatus,
)
from .exceptions import ConfigurationError


class ReportModel(BaseModel):
    model_config = {"extra": "ignore", "populate_by_name": True}


class ReportCondition(ReportModel):
    metric: str
    status: EvaluationStatus
    value: str | None = None


class ReportQualityGate(ReportModel):
    status: QualityGateStatus
    conditions: list[ReportCondition] = []


class ReportIssue(ReportModel):
    key: str = ""
    component: str
    path: str | None = None
    line: int | None = None
    status: IssueStatus = IssueStatus.OPEN
    message: str = ""
    severity: str = ""
    rule: str = ""
    revision: str | None = None
    comment: str = ""


class Report(ReportModel):
    commit_sha: str
    pull_request: str | int
    project_key: str
    scanner_properties: dict[str, str] = {}
    quality_gate: ReportQualityGate
    summary: str = ""
    issues: list[ReportIssue] = []


class ReportBlameLookup:
    """Blame answered from the revisions recorded in the report."""

    def __init__(self, revisions: Mapping[tuple[str, int], str]) -> None:
        self._revisions = dict(revisions)

    def revision_for_line(self, component_key: str, line: int) -> str | None:
        return self._revisions.get((component_key, line))


class PrerenderedFormatter:
    """Hands back the comment bodies stored in the report."""

    def __init__(self, summary: str, issue_comments: Mapping[str, str]) -> None:
        self._summary = summary
        self._issue_comments = dict(issue_comments)

    def summary(self, analysis: AnalysisDetails) -> str:
        return self._summary

    def issue_summary(self, analysis: AnalysisDetails, issue: ComponentIssue) -> str:
        return self._issue_comments.get(issue.key) or issue.message


def to_analysis(
    report: Report, scanner_overrides: Mapping[str, str] | None = None
) -> AnalysisDetails:
    issues = [
        ComponentIssue(
            component=Component(key=item.component, scm_path=item.path),
            key=item.key,
            line=item.line,
            status=item.status,
            message=item.message,
            severity=item.severity,
            rule=item.rule,
        )
        for item in report.issues
    ]
    revisions = {
        (item.component, item.line): item.revision
        for item in report.issues
        if item.line is not None and item.revision
    }
    return AnalysisDetails(
        commit_sha=report.commit_sha,
        pull_request_id=str(report.pull_request),
        project_key=report.project_key,
        quality_gate_status=report.quality_gate.status,
        blame=ReportBlameLookup(revisions),
        formatter=PrerenderedFormatter(
            report.summary, {item.key: item.comment for item in report.issues if item.key}
        ),
        scanner_properties={**report.scanner_properties, **(scanner_overrides or {})},
        conditions=[
            Condition(metric_key=c.metric, status=c.status, value=c.value)
            for c in report.quality_gate.conditions
        ],
        issues=issues,
    )


def load_report(
    path: str | Path, scanner_overrides: Mapping[str, str] | None = None
) -> AnalysisDetails:
    """Read a report file into an ``AnalysisDetails``."""
    text = Path(path).read_text(encoding="utf-8")
    try:
        report = Report.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError) as e:
        msg = f"Invalid analysis report {path}: {e}"
        raise ConfigurationError(msg) from e
    return to_analysis(report, scanner_overrides)
