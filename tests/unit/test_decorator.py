"""Tests for a full decoration pass against a mocked GitLab."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
import respx
from factories import MERGE_REQUEST, PROJECT, TEST_URL, make_analysis, make_issue

from mr_decorator.analysis import Condition, EvaluationStatus, QualityGateStatus
from mr_decorator.config import DecoratorConfig
from mr_decorator.decorator import MergeRequestDecorator
from mr_decorator.exceptions import ConfigurationError, DecorationError, GitLabApiError

MR = f"{PROJECT}/merge_requests/7"


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@pytest.fixture
def decorator(config: DecoratorConfig) -> MergeRequestDecorator:
    return MergeRequestDecorator(config_factory=lambda analysis: config)


@pytest.fixture
def gitlab(mock_api: respx.MockRouter) -> respx.MockRouter:
    mock_api.get(f"{MR}/commits", name="commits").mock(
        side_effect=[
            httpx.Response(
                200,
                json=[{"id": "a"}, {"id": "b"}],
                headers={"Link": f'<{TEST_URL}{MR}/commits?page=2>; rel="next"'},
            ),
            httpx.Response(200, json=[{"id": "c"}]),
        ]
    )
    mock_api.get(MR, name="merge_request").mock(
        return_value=httpx.Response(200, json=MERGE_REQUEST)
    )
    mock_api.post(f"{PROJECT}/statuses/head0", name="status").mock(
        return_value=httpx.Response(201, json={"id": 1})
    )
    mock_api.post(f"{MR}/discussions", name="discussions").mock(
        return_value=httpx.Response(201, json={"id": "d"})
    )
    return mock_api


def test_full_pass(decorator: MergeRequestDecorator, gitlab: respx.MockRouter):
    analysis = make_analysis(
        [
            make_issue("X", path="foo.go", line=10),
            make_issue("Y", path="bar.go", line=3),
            make_issue("Z", path="baz.go", line=None),
        ],
        {("proj:foo.go", 10): "b", ("proj:bar.go", 3): "z"},
    )

    result = decorator.decorate(analysis)

    assert result.state == "success"
    assert result.coverage == "85.5"
    assert result.inline_comments == 1
    assert result.skipped_issues == 2
    assert gitlab["commits"].call_count == 2

    status = gitlab["status"].calls.last.request
    assert dict(status.url.params) == {
        "name": "SonarQube",
        "state": "success",
        "target_url": "https://sonar.example.com/dashboard?id=my%3Aproject&pullRequest=7",
        "description": "SonarQube Status",
        "coverage": "85.5",
    }

    discussions = [_form(call.request) for call in gitlab["discussions"].calls]
    assert discussions == [
        {"body": "Summary for my:project"},
        {
            "body": "Issue X",
            "position[base_sha]": "base0",
            "position[start_sha]": "start0",
            "position[head_sha]": "head0",
            "position[new_path]": "foo.go",
            "position[new_line]": "10",
            "position[position_type]": "text",
        },
    ]


def test_requests_are_sequenced(decorator: MergeRequestDecorator, gitlab: respx.MockRouter):
    analysis = make_analysis([make_issue("X")], {("proj:foo.go", 10): "a"})
    decorator.decorate(analysis)
    paths = [(call.request.method, call.request.url.path) for call in gitlab.calls]
    base = "/api/v4/projects/my-group/my-project"
    assert [method for method, _ in paths] == ["GET", "GET", "GET", "POST", "POST", "POST"]
    assert paths[3][1].startswith(f"{base}/statuses/")
    assert paths[4][1] == paths[5][1] == f"{base}/merge_requests/7/discussions"


def test_failed_quality_gate_without_coverage(
    decorator: MergeRequestDecorator, gitlab: respx.MockRouter
):
    analysis = make_analysis(
        quality_gate_status=QualityGateStatus.ERROR,
        coverage=Condition("new_coverage", EvaluationStatus.NO_VALUE),
    )
    result = decorator.decorate(analysis)
    params = gitlab["status"].calls.last.request.url.params
    assert params["state"] == "failed"
    assert params["coverage"] == "0"
    assert result.state == "failed"


def test_status_transition_conflict_is_tolerated(
    decorator: MergeRequestDecorator, gitlab: respx.MockRouter
):
    gitlab["status"].mock(
        return_value=httpx.Response(
            400, json={"message": "Cannot transition status via :run from :running"}
        )
    )
    analysis = make_analysis([make_issue("X")], {("proj:foo.go", 10): "a"})
    result = decorator.decorate(analysis)
    assert result.inline_comments == 1
    assert gitlab["discussions"].call_count == 2


def test_status_failure_aborts_before_comments(
    decorator: MergeRequestDecorator, gitlab: respx.MockRouter
):
    gitlab["status"].mock(return_value=httpx.Response(500, text="boom"))
    with pytest.raises(GitLabApiError) as exc_info:
        decorator.decorate(make_analysis([make_issue("X")], {("proj:foo.go", 10): "a"}))
    assert exc_info.value.status_code == 500
    assert gitlab["discussions"].call_count == 0


def test_comment_failure_stops_remaining_comments(
    decorator: MergeRequestDecorator, gitlab: respx.MockRouter
):
    gitlab["discussions"].mock(
        side_effect=[
            httpx.Response(201, json={"id": "summary"}),
            httpx.Response(500, text="boom"),
            httpx.Response(201, json={"id": "never"}),
        ]
    )
    analysis = make_analysis(
        [make_issue("1", line=1), make_issue("2", line=2)],
        {("proj:foo.go", 1): "a", ("proj:foo.go", 2): "b"},
    )
    with pytest.raises(GitLabApiError):
        decorator.decorate(analysis)
    assert gitlab["discussions"].call_count == 2
    assert gitlab["status"].call_count == 1


def test_missing_coverage_condition(decorator: MergeRequestDecorator, gitlab: respx.MockRouter):
    analysis = make_analysis(coverage=Condition("new_bugs", EvaluationStatus.OK, "0"))
    with pytest.raises(DecorationError, match="New Coverage"):
        decorator.decorate(analysis)
    assert gitlab["status"].call_count == 0


def test_missing_scanner_property_fails_before_network(
    mock_api: respx.MockRouter, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("GITLAB_TOKEN", "test-token")
    analysis = make_analysis(scanner_properties={})
    with pytest.raises(ConfigurationError, match="has not been set in scanner properties"):
        MergeRequestDecorator().decorate(analysis)
    assert mock_api.calls.call_count == 0


def test_missing_public_url_fails_before_network(
    mock_api: respx.MockRouter, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("GITLAB_TOKEN", "test-token")
    monkeypatch.delenv("SONAR_PUBLIC_URL", raising=False)
    monkeypatch.delenv("SONAR_HOST_URL", raising=False)
    with pytest.raises(ConfigurationError, match="SONAR_PUBLIC_URL"):
        MergeRequestDecorator().decorate(make_analysis())
    assert mock_api.calls.call_count == 0


def test_default_config_from_scanner_properties(
    gitlab: respx.MockRouter, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("GITLAB_TOKEN", "env-token")
    monkeypatch.setenv("SONAR_PUBLIC_URL", "https://public.example.com")
    MergeRequestDecorator().decorate(make_analysis())
    status = gitlab["status"].calls.last.request
    assert status.headers["PRIVATE-TOKEN"] == "env-token"
    assert status.url.params["target_url"].startswith("https://public.example.com/dashboard?")
