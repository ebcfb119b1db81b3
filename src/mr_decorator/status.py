"""Commit build status parameters."""

from __future__ import annotations

from urllib.parse import urlencode

from .analysis import Condition, EvaluationStatus, QualityGateStatus

STATUS_NAME = "SonarQube"
STATUS_DESCRIPTION = "SonarQube Status"


def status_state(quality_gate_status: QualityGateStatus) -> str:
    return "success" if quality_gate_status == QualityGateStatus.OK else "failed"


def coverage_value(condition: Condition) -> str:
    """Coverage reported to GitLab; ``"0"`` when the condition has no value."""
    if condition.status == EvaluationStatus.NO_VALUE or condition.value is None:
        return "0"
    return condition.value


def dashboard_url(public_root_url: str, project_key: str, pull_request_id: str) -> str:
    query = urlencode({"id": project_key, "pullRequest": pull_request_id})
    return f"{public_root_url}/dashboard?{query}"


def status_params(
    quality_gate_status: QualityGateStatus,
    target_url: str,
    coverage: str,
) -> dict[str, str]:
    """Query parameters for ``POST /projects/:id/statuses/:sha``.

    Values are left unencoded; the HTTP client builds the query string.
    """
    return {
        "name": STATUS_NAME,
        "state": status_state(quality_gate_status),
        "target_url": target_url,
        "description": STATUS_DESCRIPTION,
        "coverage": coverage,
    }
