"""Discussion payloads for the merge request.

Inline comments are only produced for issues whose line was last touched by a
commit of the merge request; GitLab cannot anchor a comment on a line outside
the MR's own diff.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterator

from .analysis import AnalysisDetails, ComponentIssue
from .exceptions import DecorationError
from .models.merge_requests import MergeRequest

logger = logging.getLogger(__name__)

CommentPayload = dict[str, str]


def summary_comment(analysis: AnalysisDetails) -> CommentPayload:
    return {"body": analysis.create_summary()}


def inline_comment(
    body: str, merge_request: MergeRequest, path: str, line: int
) -> CommentPayload:
    refs = merge_request.diff_refs
    if refs is None or not (refs.base_sha and refs.start_sha and refs.head_sha):
        msg = f"Merge request !{merge_request.iid} has no diff refs to anchor {path}:{line}"
        raise DecorationError(msg)
    return {
        "body": body,
        "position[base_sha]": refs.base_sha,
        "position[start_sha]": refs.start_sha,
        "position[head_sha]": refs.head_sha,
        "position[new_path]": path,
        "position[new_line]": str(line),
        "position[position_type]": "text",
    }


def blamed_in_merge_request(
    analysis: AnalysisDetails, issue: ComponentIssue, commits: Collection[str]
) -> str | None:
    """Return the SCM path of ``issue`` if it may be commented inline, else ``None``."""
    if not issue.is_open:
        return None
    path = analysis.scm_path_for(issue)
    line = issue.line
    if path is None or line is None:
        return None

    revision = analysis.blame.revision_for_line(issue.component.key, line)
    if revision is None:
        logger.info("Skipping %s:%d since no changeset is recorded for the line", path, line)
        return None
    if revision not in commits:
        logger.info("Skipping %s:%d since the commit does not belong to the MR", path, line)
        return None
    return path


def inline_comments(
    analysis: AnalysisDetails, commits: Collection[str], merge_request: MergeRequest
) -> Iterator[CommentPayload]:
    """Yield one inline discussion payload per issue blamed on a commit of the MR."""
    for issue in analysis.issues:
        path = blamed_in_merge_request(analysis, issue, commits)
        if path is None:
            continue
        body = analysis.create_issue_summary(issue)
        yield inline_comment(body, merge_request, path, issue.line)
