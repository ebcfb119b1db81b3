"""One decoration pass: status, summary discussion and inline discussions."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .analysis import NEW_COVERAGE_METRIC, AnalysisDetails
from .client import GitLabClient
from .comments import inline_comments, summary_comment
from .config import DecoratorConfig
from .exceptions import DecorationError
from .status import coverage_value, dashboard_url, status_params, status_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecorationResult:
    state: str
    coverage: str
    inline_comments: int
    skipped_issues: int


class MergeRequestDecorator:
    """Reports an analysis back to its GitLab merge request.

    Requests go out strictly in order: commit status, summary discussion, then
    one discussion per accepted issue. The first failure aborts the pass and
    whatever was already posted stays posted.
    """

    def __init__(
        self,
        client_factory: Callable[[DecoratorConfig], GitLabClient] = GitLabClient,
        config_factory: Callable[[AnalysisDetails], DecoratorConfig] | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._config_factory = config_factory or (
            lambda analysis: DecoratorConfig.from_scanner_properties(analysis.scanner_properties)
        )

    def decorate(self, analysis: AnalysisDetails) -> DecorationResult:
        logger.info(
            "Decorating merge request %s of %s at %s",
            analysis.pull_request_id,
            analysis.project_key,
            analysis.commit_sha,
        )
        config = self._config_factory(analysis)
        client = self._client_factory(config)
        project = config.repository_slug
        mr_iid = analysis.pull_request_id

        commits = frozenset(client.list_merge_request_commits(project, mr_iid))
        merge_request = client.get_merge_request(project, mr_iid)
        logger.info("Merge request !%s has %d commits", merge_request.iid, len(commits))

        condition = analysis.find_condition(NEW_COVERAGE_METRIC)
        if condition is None:
            msg = "Could not find New Coverage Condition in analysis"
            raise DecorationError(msg)
        coverage = coverage_value(condition)

        target_url = dashboard_url(
            config.public_root_url, analysis.project_key, analysis.pull_request_id
        )
        client.post_commit_status(
            project,
            analysis.commit_sha,
            status_params(analysis.quality_gate_status, target_url, coverage),
        )

        client.create_mr_discussion(project, mr_iid, summary_comment(analysis))

        posted = 0
        for fields in inline_comments(analysis, commits, merge_request):
            logger.info(
                "Posting comment on %s:%s",
                fields["position[new_path]"],
                fields["position[new_line]"],
            )
            client.create_mr_discussion(project, mr_iid, fields)
            posted += 1

        return DecorationResult(
            state=status_state(analysis.quality_gate_status),
            coverage=coverage,
            inline_comments=posted,
            skipped_issues=len(analysis.issues) - posted,
        )
